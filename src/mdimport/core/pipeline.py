"""Import orchestration: per-file validate -> resolve -> build -> upsert, and the run loop"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from mdimport.config import Settings
from mdimport.core.assets import AssetUploader
from mdimport.core.authors import AuthorResolver
from mdimport.core.body import markdown_to_portable_text
from mdimport.core.document import build_post, post_slug, validate_frontmatter
from mdimport.core.errors import ConfigurationError, FileNotFound, MdImportError
from mdimport.core.models import FileOutcome, ImportSummary
from mdimport.core.parse import parse_file, resolve_path
from mdimport.core.utils.keys import seeded_keys
from mdimport.core.utils.retry import with_retry


logger = logging.getLogger(__name__)


@dataclass
class ImportOptions:
    write:         bool = False
    draft:         bool = False
    only:          Optional[str] = None
    parser_config: str = "gfm-like"
    max_attempts:  int = 3
    base_delay:    float = 1.0


class SlugRegistry:
    """Slug -> first source file that claimed it, for collision warnings within one run."""

    def __init__(self):
        self._owners: dict[str, Path] = {}

    def check(self, slug: str, path: Path) -> Path | None:
        """Record path as the slug's owner; return the earlier owner if a different file had it."""
        owner = self._owners.get(slug)
        if owner is not None and owner != path:
            return owner
        self._owners[slug] = path
        return None


def make_store(settings: Settings, write: bool):
    """Build the write target for a run, or None for a dry run (no store calls at all)."""
    if not write:
        return None
    if settings.db_url:
        from mdimport.crud.sql_store import SQLStore
        return SQLStore.from_url(settings.db_url)

    missing = settings.missing_sanity_settings()
    if missing:
        raise ConfigurationError(f"Missing env vars: {', '.join(missing)}")
    from mdimport.crud.sanity import SanityStore
    return SanityStore(
        project_id=settings.sanity_project_id,
        dataset=settings.sanity_dataset,
        token=settings.sanity_token,
        api_version=settings.sanity_api_version,
        timeout=settings.request_timeout,
    )


class Importer:
    """Owns one run's state (asset cache, author memo, slug registry) and imports files in order."""

    def __init__(self, options: ImportOptions, store=None):
        self.options = options
        self.store = store
        self.uploader = AssetUploader(
            store, write=options.write, max_attempts=options.max_attempts, base_delay=options.base_delay,
        )
        self.authors = AuthorResolver(
            store, write=options.write, draft=options.draft,
            max_attempts=options.max_attempts, base_delay=options.base_delay,
        )
        self.slugs = SlugRegistry()

    async def import_file(self, path: Path, index: int = 0, total: int = 1) -> FileOutcome:
        """Import one post. Raises MdImportError (or OSError/ValueError) on failure."""
        path = Path(path)
        logger.info(f"[{index + 1}/{total}] {path.name}")

        parsed = parse_file(path)
        fm = parsed.frontmatter
        validate_frontmatter(fm, path)
        slug = post_slug(fm, path)

        warnings = []
        previous = self.slugs.check(slug, path)
        if previous is not None:
            message = f'Slug collision: "{slug}" used by both {previous} and {path}; the second file will overwrite the first'
            logger.warning(
                f'  [warn] Slug collision: "{slug}" used by both:\n'
                f"         - {previous}\n"
                f"         - {path}\n"
                f"         The second file will overwrite the first!"
            )
            warnings.append(message)

        if self.options.only and slug != self.options.only:
            logger.info(f'  [skip] slug "{slug}" does not match --only "{self.options.only}"')
            return FileOutcome(path=path, status="skipped", slug=slug, warnings=warnings)

        author_ref = await self.authors.ensure(author_id=fm.get("authorId"), author=fm.get("author"))

        cover = resolve_path(path, fm["mainImage"])
        if cover is None or not cover.exists():
            raise FileNotFound(f"mainImage file not found: {fm['mainImage']} (resolved: {cover})", cover)
        cover_record = await self.uploader.resolve(cover)

        with seeded_keys(slug):
            body = await markdown_to_portable_text(path, parsed.body, self.uploader, self.options.parser_config)

        mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        post = build_post(
            fm, slug, author_ref, cover_record.asset_id, body,
            draft=self.options.draft, fallback_published=mtime,
        )
        doc = post.to_sanity()

        if not self.options.write:
            logger.info(f"  [dry] would upsert: {post.id}")
            return FileOutcome(path=path, status="dry", slug=slug, doc_id=post.id, warnings=warnings)

        await with_retry(
            lambda: self.store.create_or_replace(doc),
            max_attempts=self.options.max_attempts,
            base_delay=self.options.base_delay,
            context=f'upsert post "{slug}"',
        )
        logger.info(f"  [ok] upserted: {post.id}")
        return FileOutcome(path=path, status="ok", slug=slug, doc_id=post.id, warnings=warnings)

    async def run(self, files: list[Path]) -> ImportSummary:
        """Import files sequentially; a failure is recorded and the run moves on."""
        summary = ImportSummary()
        for i, f in enumerate(files):
            try:
                outcome = await self.import_file(f, i, len(files))
            except (MdImportError, OSError, ValueError) as e:
                logger.error(f"  [error] {e}")
                outcome = FileOutcome(path=Path(f), status="failed", error=str(e))
            summary.outcomes.append(outcome)
        return summary
