"""File discovery, context-annotated file reads, and frontmatter extraction"""

import errno
import re
from pathlib import Path
from typing import Any

import yaml

from mdimport.core.errors import FileNotFound, ReadError
from mdimport.core.models import ParsedPost


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*(?:\n|$)', re.DOTALL)
MD_EXTENSIONS = {'.md'}

_ERRNO_DETAILS = {
    errno.ENOENT: "file not found",
    errno.EACCES: "permission denied",
    errno.EMFILE: "too many open files",
    errno.EISDIR: "path is a directory",
}


def _read_error(path: Path, context: str, e: OSError) -> Exception:
    """Map an OSError to FileNotFound/ReadError with the path and errno name in the message."""
    code = errno.errorcode.get(e.errno, "UNKNOWN") if e.errno else "UNKNOWN"
    details = _ERRNO_DETAILS.get(e.errno, e.strerror or str(e))
    message = f"Failed to read {context}: {path} ({code}: {details})"
    if e.errno == errno.ENOENT:
        return FileNotFound(message, path)
    return ReadError(message, path)


def read_bytes_with_context(path: Path, context: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise _read_error(path, context, e) from e


def read_text_with_context(path: Path, context: str) -> str:
    try:
        return Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise _read_error(path, context, e) from e


def resolve_path(md_path: Path, maybe_relative: str | None) -> Path | None:
    """Resolve a frontmatter/inline path against the Markdown file's directory."""
    if not maybe_relative:
        return None
    p = Path(str(maybe_relative))
    if p.is_absolute():
        return p.resolve()
    return (Path(md_path).parent / p).resolve()


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS and p.is_file())


def parse_file(path: Path) -> ParsedPost:
    """Read a Markdown post and split it into frontmatter and body."""
    raw = read_text_with_context(path, "markdown post")
    frontmatter, body = _strip_frontmatter(raw)
    return ParsedPost(path=Path(path), frontmatter=frontmatter, body=body)
