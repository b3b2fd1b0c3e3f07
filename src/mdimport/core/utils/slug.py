"""Slug generation for document identifiers"""

import re


_NON_ALNUM_RE = re.compile(r'[^a-z0-9]+')


def slugify(text) -> str:
    """Convert text to a lowercase, hyphen-separated slug. Raises ValueError if nothing survives."""
    slug = _NON_ALNUM_RE.sub('-', str(text or '').strip().lower()).strip('-')
    if not slug:
        raise ValueError(f'Cannot generate valid slug from input: "{text}"')
    return slug
