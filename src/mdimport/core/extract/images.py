"""Inline image extraction: swap Markdown images for placeholder tokens before conversion"""

import re
import secrets

from mdimport.core.extract.convert import make_parser
from mdimport.core.models import ImageRef


# ![alt](path "caption") or ![alt](<path with spaces> "caption"); caption optional
IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(\s*(?:<([^>]+)>|([^\s)]+))\s*(?:"([^"]+)")?\s*\)')

# Backtick run, content, matching run of the same length; never spans a blank line
CODE_SPAN_RE = re.compile(r'(?<!`)(`+)(?!`)((?:(?!\n[ \t]*\n).)+?)(?<!`)\1(?!`)', re.DOTALL)

TOKEN_PREFIX = "[[[IMAGE_"
TOKEN_SUFFIX = "]]]"


def make_token(nonce: str, index: int) -> str:
    return f"{TOKEN_PREFIX}{nonce}_{index}{TOKEN_SUFFIX}"


def _inside(pos: int, ranges: list[tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in ranges)


def code_ranges(markdown: str, parser_config: str = 'gfm-like') -> list[tuple[int, int]]:
    """Character ranges of fenced/indented code blocks and inline code spans."""
    line_starts = [0] + [i + 1 for i, ch in enumerate(markdown) if ch == '\n']

    def _offset(line: int) -> int:
        return line_starts[line] if line < len(line_starts) else len(markdown)

    ranges = [
        (_offset(t.map[0]), _offset(t.map[1]))
        for t in make_parser(parser_config).parse(markdown)
        if t.type in ('fence', 'code_block') and t.map
    ]
    for m in CODE_SPAN_RE.finditer(markdown):
        if not _inside(m.start(), ranges):
            ranges.append(m.span())
    return ranges


def extract_inline_images(
    markdown: str,
    nonce: str | None = None,
    parser_config: str = 'gfm-like',
    ) -> tuple[str, list[ImageRef]]:
    """Replace each inline image with a unique token on its own paragraph.

    Returns the rewritten Markdown and the ImageRefs in source order. The
    nonce keeps tokens from colliding with lookalike text already in the
    post; tokens are numbered from 0 in order of appearance. Image syntax
    inside code blocks and code spans is left as written.
    """
    nonce = nonce or secrets.token_hex(4)
    markdown = markdown.replace('\r\n', '\n').replace('\r', '\n')
    skip = code_ranges(markdown, parser_config)
    images: list[ImageRef] = []

    def _replace(m: re.Match) -> str:
        if _inside(m.start(), skip):
            return m.group(0)
        alt, angle_src, plain_src, caption = m.groups()
        token = make_token(nonce, len(images))
        images.append(ImageRef(
            token=token,
            alt=(alt or "").strip(),
            src=(angle_src or plain_src or "").strip(),
            caption=(caption or "").strip(),
        ))
        # A token alone in its paragraph usually converts to a token-only block.
        return f"\n\n{token}\n\n"

    return IMAGE_RE.sub(_replace, markdown), images
