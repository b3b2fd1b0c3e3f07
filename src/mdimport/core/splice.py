"""Splice uploaded image blocks into Portable Text at their placeholder tokens

The converter sees each inline image as a literal placeholder token. Here the
tokens are swapped back for image blocks without disturbing surrounding span
marks (strong/em/code/link) or the block's markDefs:

- a block whose text is just one token becomes the image block;
- a block with tokens embedded in its text is split around each token, span
  by span, with every fragment keeping its original marks;
- anything else passes through untouched.
"""

from typing import Iterable

from mdimport.core.errors import UnresolvedPlaceholderError
from mdimport.core.utils.keys import generate_key


UNSUPPORTED_BLOCK_TYPES = {'horizontal-rule'}


def _is_text_block(block) -> bool:
    return isinstance(block, dict) and block.get('_type') == 'block' and isinstance(block.get('children'), list)


def _is_text_span(child) -> bool:
    return isinstance(child, dict) and child.get('_type') == 'span' and isinstance(child.get('text'), str)


def block_text(block: dict) -> str:
    """Concatenated text of a text block's spans; '' for anything else."""
    if not _is_text_block(block):
        return ''
    return ''.join(c['text'] for c in block['children'] if _is_text_span(c))


def has_meaningful_children(block: dict) -> bool:
    """True if the block has a non-span child or a span with non-blank text."""
    for child in block.get('children') or []:
        if not child:
            continue
        if not isinstance(child, dict) or child.get('_type') != 'span':
            return True
        if isinstance(child.get('text'), str) and child['text'].strip():
            return True
    return False


def _with_key(item: dict) -> dict:
    return item if item.get('_key') else {**item, '_key': generate_key()}


def _empty_like(block: dict) -> dict:
    """A fresh text block carrying the original block's style, markDefs and list attributes."""
    new = {
        '_key': generate_key(),
        '_type': 'block',
        'style': block.get('style') or 'normal',
        'markDefs': list(block.get('markDefs') or []),
        'children': [],
    }
    for attr in ('listItem', 'level'):
        if attr in block:
            new[attr] = block[attr]
    return new


def _nearest_token(text: str, tokens: Iterable[str]) -> tuple[int, str | None]:
    """Return (index, token) of the leftmost token occurrence in text, or (-1, None)."""
    best_idx, best = -1, None
    for t in tokens:
        idx = text.find(t)
        if idx != -1 and (best is None or idx < best_idx):
            best_idx, best = idx, t
    return best_idx, best


def split_block(block: dict, token_to_image: dict[str, dict]) -> list[dict]:
    """Split one text block at every token occurrence, preserving span marks.

    Result is [block?, image, block?, image, ..., block?]; text blocks with no
    meaningful content are dropped.
    """
    out: list[dict] = []
    current = _empty_like(block)

    def flush() -> None:
        nonlocal current
        if has_meaningful_children(current):
            out.append(current)
        current = _empty_like(block)

    for child in block['children']:
        if not _is_text_span(child):
            if child:
                current['children'].append(_with_key(child))
            continue

        text = child['text']
        while True:
            idx, token = _nearest_token(text, token_to_image)
            if token is None:
                if text:
                    current['children'].append({**child, '_key': generate_key(), 'text': text})
                break

            before, text = text[:idx], text[idx + len(token):]
            if before:
                current['children'].append({**child, '_key': generate_key(), 'text': before})
            flush()
            out.append({**token_to_image[token], '_key': generate_key()})

    flush()
    return out


def splice_image_blocks(blocks: list[dict], token_to_image: dict[str, dict]) -> list[dict]:
    """Replace placeholder tokens inside blocks with their image blocks, in source order."""
    out: list[dict] = []

    for block in blocks:
        if not _is_text_block(block):
            out.append(_with_key(block))
            continue

        text = block_text(block)
        stripped = text.strip()
        if stripped in token_to_image:
            out.append({**token_to_image[stripped], '_key': generate_key()})
        elif any(t in text for t in token_to_image):
            out.extend(split_block(block, token_to_image))
        else:
            out.append(block)

    return out


def ensure_keys(blocks: list[dict]) -> list[dict]:
    """Give every block and every child a `_key` if it lacks one."""
    keyed = []
    for block in blocks:
        block = _with_key(block)
        if isinstance(block.get('children'), list):
            block = {**block, 'children': [_with_key(c) if isinstance(c, dict) else c for c in block['children']]}
        keyed.append(block)
    return keyed


def filter_unsupported_blocks(blocks: list[dict]) -> list[dict]:
    """Drop block types the destination schema does not accept."""
    return [b for b in blocks if b.get('_type') not in UNSUPPORTED_BLOCK_TYPES]


def _searchable_text(block: dict) -> str:
    if isinstance(block, dict) and isinstance(block.get('code'), str):
        return block['code']
    if isinstance(block, dict) and block.get('_type') == 'table':
        return '\n'.join(str(c) for row in block.get('rows') or [] for c in row.get('cells') or [])
    return block_text(block)


def find_unresolved_tokens(blocks: list[dict], tokens: Iterable[str]) -> list[str]:
    """Return tokens whose text still appears in any text or code block."""
    texts = [_searchable_text(b) for b in blocks]
    return [t for t in tokens if any(t in text for text in texts)]


def assert_no_placeholders(blocks: list[dict], tokens: Iterable[str]) -> None:
    """Raise if a token survived splicing (converter split it across differently-marked spans)."""
    leftover = find_unresolved_tokens(blocks, tokens)
    if leftover:
        raise UnresolvedPlaceholderError(leftover)
