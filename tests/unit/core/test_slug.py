"""Unit tests for core/utils/slug.py"""

import pytest

from mdimport.core.utils.slug import slugify


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-ch-rs"),
    ("cover.PNG", "cover-png"),
])
def test_slugify_basic(text, expected):
    """slugify lowercases and collapses non-alphanumeric runs to one hyphen."""
    assert slugify(text) == expected


def test_slugify_preserves_hyphens():
    assert slugify("already-slugified") == "already-slugified"


def test_slugify_strips_leading_trailing_hyphens():
    assert slugify("!leading!") == "leading"


@pytest.mark.parametrize("text", ["", "   ", "!!!", None])
def test_slugify_empty_raises(text):
    """Inputs with no alphanumerics cannot produce a slug."""
    with pytest.raises(ValueError):
        slugify(text)
