"""Unit tests for core/document.py"""

from datetime import date, datetime, timezone

import pytest

from mdimport.core.document import (
    build_post,
    make_document_id,
    normalize_categories,
    parse_published_at,
    post_slug,
    validate_frontmatter,
)
from mdimport.core.errors import ValidationError


def test_validation_reports_every_missing_field():
    """Missing mainImage and mainImageAlt are both reported in one failure."""
    fm = {"title": "T", "author": "A"}
    with pytest.raises(ValidationError) as exc:
        validate_frontmatter(fm, "post.md")
    assert exc.value.errors == ["missing 'mainImage'", "missing 'mainImageAlt'"]
    assert "post.md" in str(exc.value)


def test_validation_empty_frontmatter_lists_all():
    with pytest.raises(ValidationError) as exc:
        validate_frontmatter({}, "post.md")
    assert len(exc.value.errors) == 4


def test_author_id_satisfies_author_requirement():
    validate_frontmatter({"title": "T", "authorId": "author-x", "mainImage": "c.png", "mainImageAlt": "c"}, "p.md")


def test_invalid_published_at_is_reported():
    fm = {"title": "T", "author": "A", "mainImage": "c.png", "mainImageAlt": "c", "publishedAt": "last tuesday"}
    with pytest.raises(ValidationError, match="invalid 'publishedAt' date: last tuesday"):
        validate_frontmatter(fm, "p.md")


@pytest.mark.parametrize("value,expected", [
    ("2025-01-15T10:00:00Z", datetime(2025, 1, 15, 10, tzinfo=timezone.utc)),
    ("2025-01-15", datetime(2025, 1, 15, tzinfo=timezone.utc)),
    (date(2025, 1, 15), datetime(2025, 1, 15, tzinfo=timezone.utc)),
    (datetime(2025, 1, 15, 10), datetime(2025, 1, 15, 10, tzinfo=timezone.utc)),
    ("2025-01-15T12:00:00+02:00", datetime(2025, 1, 15, 10, tzinfo=timezone.utc)),
    ("January 15, 2025", datetime(2025, 1, 15, tzinfo=timezone.utc)),
    ("2025/01/15", datetime(2025, 1, 15, tzinfo=timezone.utc)),
    ("Wed, 15 Jan 2025 10:00:00 GMT", datetime(2025, 1, 15, 10, tzinfo=timezone.utc)),
    (None, None),
])
def test_parse_published_at(value, expected):
    assert parse_published_at(value) == expected


@pytest.mark.parametrize("doc_type,slug,draft,expected", [
    ("post", "hello", False, "post-hello"),
    ("post", "hello", True, "drafts.post-hello"),
    ("author", "jane-doe", False, "author-jane-doe"),
])
def test_make_document_id(doc_type, slug, draft, expected):
    assert make_document_id(doc_type, slug, draft) == expected


def test_post_slug_prefers_explicit():
    assert post_slug({"slug": "custom", "title": "Other"}, "p.md") == "custom"


def test_post_slug_from_title():
    assert post_slug({"title": "Hello, World!"}, "p.md") == "hello-world"


def test_post_slug_empty_fails_validation():
    with pytest.raises(ValidationError, match="Cannot generate valid slug"):
        post_slug({"title": "!!!"}, "p.md")


@pytest.mark.parametrize("value,expected", [
    (["a", 2], ["a", "2"]),
    ("single", ["single"]),
    (None, []),
])
def test_normalize_categories(value, expected):
    assert normalize_categories(value) == expected


def test_build_post_shape():
    fm = {
        "title": "Hello",
        "mainImageAlt": "Cover",
        "publishedAt": "2025-01-15T10:00:00Z",
        "excerpt": "Short",
        "categories": ["news"],
    }
    body = [{"_key": "k", "_type": "block", "children": []}]
    doc = build_post(fm, "hello", "author-jane", "image-abc-png", body, draft=True).to_sanity()

    assert doc == {
        "_id": "drafts.post-hello",
        "_type": "post",
        "title": "Hello",
        "slug": {"_type": "slug", "current": "hello"},
        "author": {"_type": "reference", "_ref": "author-jane"},
        "mainImage": {
            "_type": "image",
            "asset": {"_type": "reference", "_ref": "image-abc-png"},
            "alt": "Cover",
        },
        "publishedAt": "2025-01-15T10:00:00Z",
        "excerpt": "Short",
        "body": body,
        "categories": ["news"],
    }


def test_build_post_defaults():
    fm = {"title": "Hello", "mainImageAlt": "Cover"}
    fallback = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    doc = build_post(fm, "hello", "a", "img", [], fallback_published=fallback).to_sanity()
    assert doc["publishedAt"] == "2024-06-01T12:00:00Z"
    assert doc["excerpt"] is None
    assert doc["categories"] == []


@pytest.mark.parametrize("value", ["January 15, 2025", "2025/01/15", "Wed, 15 Jan 2025 10:00:00 GMT"])
def test_non_iso_dates_pass_validation(value):
    fm = {"title": "T", "author": "A", "mainImage": "c.png", "mainImageAlt": "c", "publishedAt": value}
    validate_frontmatter(fm, "p.md")


@pytest.mark.parametrize("value", [0, 20250115, True])
def test_non_string_published_at_is_reported(value):
    fm = {"title": "T", "author": "A", "mainImage": "c.png", "mainImageAlt": "c", "publishedAt": value}
    with pytest.raises(ValidationError, match="invalid 'publishedAt' date"):
        validate_frontmatter(fm, "p.md")


def test_published_at_is_normalized_to_utc():
    fm = {"title": "T", "mainImageAlt": "c", "publishedAt": "2025-01-15T12:00:00+02:00"}
    doc = build_post(fm, "t", "a", "img", []).to_sanity()
    assert doc["publishedAt"] == "2025-01-15T10:00:00Z"
