"""CLI command implementations"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdimport.config import Settings, load_config
from mdimport.core.document import post_slug
from mdimport.core.errors import ConfigurationError, MdImportError
from mdimport.core.models import ImportSummary
from mdimport.core.parse import discover_files, parse_file
from mdimport.core.pipeline import Importer, ImportOptions, make_store


CHECK_FAILED_EXIT = 2

_handler: Optional[logging.Handler] = None


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _configure_logging(verbose: bool) -> None:
    """Route mdimport.* log records to stdout as bare progress lines."""
    global _handler
    logger = logging.getLogger("mdimport")
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _files_or_fail(root: Path) -> list[Path]:
    if not root.exists():
        _fail(f"Posts path does not exist: {root}")
    files = discover_files(root)
    if not files:
        _fail(f"No markdown files found in {root}")
    return files


def _mode_label(write: bool, draft: bool) -> str:
    return ("WRITE" if write else "DRY-RUN") + (" (drafts)" if draft else "")


def _echo_summary(summary: ImportSummary, mode: str) -> None:
    typer.echo("\n------------------------")
    typer.echo("Summary:")
    typer.echo(f"  Success: {summary.succeeded}")
    typer.echo(f"  Skipped: {summary.skipped}")
    typer.echo(f"  Failed:  {summary.failed}")
    typer.echo(f"  Mode:    {mode}")


async def _run(settings: Settings, options: ImportOptions, files: list[Path]) -> ImportSummary:
    store = make_store(settings, options.write)
    try:
        return await Importer(options, store).run(files)
    finally:
        if store is not None:
            await store.close()


def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log HTTP requests and other debug detail")] = False,
    ):
    """Import Markdown posts (YAML frontmatter + body) as Portable Text documents."""
    _configure_logging(verbose)


def import_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Posts directory or single file (default: posts_dir)")] = None,
    write: Annotated[bool, typer.Option("--write", help="Perform real writes; without it the run is a dry run")] = False,
    check: Annotated[bool, typer.Option("--check", help="Exit non-zero if any file fails")] = False,
    draft: Annotated[bool, typer.Option("--draft", help="Write drafts.* documents instead of published ones")] = False,
    only: Annotated[Optional[str], typer.Option("--only", help="Import a single post by slug")] = None,
    db_url: Annotated[Optional[str], typer.Option("--db-url", help="Write to a SQL dataset instead of Sanity")] = None,
    ):
    """Import every post under the posts directory: validate, upload images, upsert."""
    settings = _settings(overrides={"posts_dir": path, "db_url": db_url})
    root = Path(settings.posts_dir)
    mode = _mode_label(write, draft)

    typer.echo("Markdown Post Importer")
    typer.echo("======================")
    typer.echo(f"Mode: {mode}")
    typer.echo(f"Posts directory: {root}")
    typer.echo(f"Dataset: {settings.dataset_label}")
    if only:
        typer.echo(f"Filter: --only {only}")

    files = _files_or_fail(root)
    typer.echo(f"Found {len(files)} markdown file(s)")

    options = ImportOptions(
        write=write,
        draft=draft,
        only=only,
        parser_config=settings.parser_config,
        max_attempts=settings.max_retries,
        base_delay=settings.retry_base_delay,
    )
    try:
        summary = asyncio.run(_run(settings, options, files))
    except ConfigurationError as e:
        _fail(str(e))

    _echo_summary(summary, mode)
    if check and summary.failed > 0:
        raise typer.Exit(CHECK_FAILED_EXIT)


def list_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Posts directory or single file (default: posts_dir)")] = None,
    ):
    """List discovered posts with the slug each would import under."""
    settings = _settings(overrides={"posts_dir": path})
    for f in _files_or_fail(Path(settings.posts_dir)):
        try:
            slug = post_slug(parse_file(f).frontmatter, f)
        except (MdImportError, ValueError) as e:
            typer.echo(f"  {f}: error: {e}")
            continue
        typer.echo(f"  {slug}: {f}")
