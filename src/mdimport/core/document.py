"""Frontmatter validation and Post document assembly"""

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from dateutil import parser as dateutil_parser

from mdimport.core.errors import ValidationError
from mdimport.core.models import Post, Reference, SlugField
from mdimport.core.utils.slug import slugify


DRAFT_PREFIX = "drafts."


def make_document_id(doc_type: str, slug: str, draft: bool = False) -> str:
    """Deterministic id `<type>-<slug>`, with the `drafts.` namespace when draft is set.

    The separator is a dash: dots are reserved for namespaces such as
    `drafts.` and hide documents from the public API.
    """
    base = f"{doc_type}-{slug}"
    return f"{DRAFT_PREFIX}{base}" if draft else base


def _as_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)


def parse_published_at(value: Any) -> datetime | None:
    """Parse a frontmatter date into an aware UTC datetime.

    YAML may already have produced a date/datetime. Strings are tried as ISO
    8601 first, then with dateutil for long-form and RFC 2822 dates. Raises
    TypeError for non-string scalars and ValueError for unparseable text.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise TypeError(f"expected a date string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = dateutil_parser.parse(value.strip())
    return _as_utc(parsed)


def validate_frontmatter(fm: dict[str, Any], path: Path | str) -> None:
    """Raise ValidationError listing every missing or invalid field."""
    errors = []
    if not fm.get("title"):
        errors.append("missing 'title'")
    if not fm.get("author") and not fm.get("authorId"):
        errors.append("missing 'author' or 'authorId'")
    if not fm.get("mainImage"):
        errors.append("missing 'mainImage'")
    if not fm.get("mainImageAlt"):
        errors.append("missing 'mainImageAlt'")

    if fm.get("publishedAt") not in (None, ""):
        try:
            parse_published_at(fm["publishedAt"])
        except (TypeError, ValueError, OverflowError):
            errors.append(f"invalid 'publishedAt' date: {fm['publishedAt']}")

    if errors:
        raise ValidationError(path, errors)


def post_slug(fm: dict[str, Any], path: Path | str) -> str:
    """Explicit frontmatter slug, else the slugified title."""
    explicit = fm.get("slug")
    if explicit:
        return str(explicit)
    try:
        return slugify(fm.get("title"))
    except ValueError as e:
        raise ValidationError(path, [str(e)]) from e


def normalize_categories(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def image_block(asset_id: str, alt: str, caption: str | None = None) -> dict[str, Any]:
    """Portable Text image block referencing an uploaded asset."""
    block = {
        "_type": "image",
        "asset": Reference(ref=asset_id).to_sanity(),
        "alt": alt,
    }
    if caption is not None:
        block["caption"] = caption
    return block


def build_post(
    fm: dict[str, Any],
    slug: str,
    author_ref: str,
    cover_asset_id: str,
    body: list[dict[str, Any]],
    draft: bool = False,
    fallback_published: datetime | None = None,
    ) -> Post:
    """Assemble the Post for a validated frontmatter mapping and converted body."""
    published = parse_published_at(fm.get("publishedAt")) or fallback_published or datetime.now(timezone.utc)
    excerpt = fm.get("excerpt")
    return Post(
        id=make_document_id("post", slug, draft),
        title=str(fm["title"]),
        slug=SlugField(current=slug),
        author=Reference(ref=author_ref),
        main_image=image_block(cover_asset_id, str(fm["mainImageAlt"])),
        published_at=published.isoformat().replace("+00:00", "Z"),
        excerpt=str(excerpt) if excerpt else None,
        body=body,
        categories=normalize_categories(fm.get("categories")),
    )
