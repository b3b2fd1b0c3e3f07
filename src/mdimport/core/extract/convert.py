"""Markdown -> Portable Text conversion over the markdown-it token stream

Block and span `_key`s are left unset here; splice.ensure_keys assigns them
once image blocks are in place. Mark definitions get keys immediately since
spans reference them by key.
"""

from markdown_it import MarkdownIt

from mdimport.core.utils.keys import generate_key


DECORATORS: dict[str, str] = {
    'strong': 'strong',
    'em':     'em',
    's':      'strike-through',
}

LIST_TYPES: dict[str, str] = {
    'bullet_list_open':  'bullet',
    'ordered_list_open': 'number',
}


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _append_text(spans: list[dict], text: str, marks: list[str]) -> None:
    """Add text as a span, merging into the previous span when marks match."""
    if not text:
        return
    if spans and spans[-1].get('_type') == 'span' and spans[-1]['marks'] == marks:
        spans[-1]['text'] += text
        return
    spans.append({'_type': 'span', 'text': text, 'marks': list(marks)})


def _remove_last(marks: list[str], mark: str) -> None:
    for i in range(len(marks) - 1, -1, -1):
        if marks[i] == mark:
            del marks[i]
            return


def inline_to_spans(children: list | None) -> tuple[list[dict], list[dict]]:
    """Convert inline tokens to (spans, markDefs), tracking open decorators and links."""
    spans: list[dict] = []
    mark_defs: list[dict] = []
    marks: list[str] = []
    links: list[str] = []

    for child in children or []:
        kind = child.type
        name = kind.rsplit('_', 1)[0]
        if kind.endswith('_open') and name in DECORATORS:
            marks.append(DECORATORS[name])
        elif kind.endswith('_close') and name in DECORATORS:
            _remove_last(marks, DECORATORS[name])
        elif kind == 'link_open':
            key = generate_key()
            mark_defs.append({'_key': key, '_type': 'link', 'href': child.attrGet('href') or ''})
            links.append(key)
            marks.append(key)
        elif kind == 'link_close':
            if links:
                _remove_last(marks, links.pop())
        elif kind == 'code_inline':
            _append_text(spans, child.content, marks + ['code'])
        elif kind == 'softbreak':
            _append_text(spans, ' ', marks)
        elif kind == 'hardbreak':
            _append_text(spans, '\n', marks)
        elif kind == 'image':
            # Images the extractor did not match (e.g. reference-style) degrade to alt text.
            _append_text(spans, child.content, marks)
        elif kind in ('text', 'html_inline'):
            _append_text(spans, child.content, marks)

    if not spans:
        spans.append({'_type': 'span', 'text': '', 'marks': []})
    return spans, mark_defs


def _text_block(inline, style: str) -> dict:
    children, mark_defs = inline_to_spans(inline.children if inline is not None else None)
    return {'_type': 'block', 'style': style, 'markDefs': mark_defs, 'children': children}


def _plain_text(inline) -> str:
    spans, _ = inline_to_spans(inline.children if inline is not None else None)
    return ''.join(s['text'] for s in spans)


def _table_block(tokens: list, start: int) -> tuple[dict, int]:
    """Collect a table into a row/cell block. Returns (block, index of table_close)."""
    rows: list[dict] = []
    i = start + 1
    while i < len(tokens) and tokens[i].type != 'table_close':
        tok = tokens[i]
        if tok.type == 'tr_open':
            rows.append({'_key': generate_key(), '_type': 'tableRow', 'cells': []})
        elif tok.type in ('th_open', 'td_open') and rows:
            inline = tokens[i + 1] if i + 1 < len(tokens) and tokens[i + 1].type == 'inline' else None
            rows[-1]['cells'].append(_plain_text(inline))
        i += 1
    return {'_type': 'table', 'rows': rows}, i


def markdown_to_blocks(markdown: str, parser_config: str = 'gfm-like') -> list[dict]:
    """Convert Markdown text to a flat, ordered list of Portable Text blocks."""
    tokens = make_parser(parser_config).parse(markdown)
    blocks: list[dict] = []
    lists: list[str] = []
    quote_depth = 0

    i = 0
    while i < len(tokens):
        tok = tokens[i]
        kind = tok.type

        if kind in LIST_TYPES:
            lists.append(LIST_TYPES[kind])
        elif kind in ('bullet_list_close', 'ordered_list_close'):
            lists.pop()
        elif kind == 'blockquote_open':
            quote_depth += 1
        elif kind == 'blockquote_close':
            quote_depth -= 1
        elif kind in ('heading_open', 'paragraph_open'):
            inline = tokens[i + 1] if i + 1 < len(tokens) and tokens[i + 1].type == 'inline' else None
            if kind == 'heading_open':
                style = tok.tag
            else:
                style = 'blockquote' if quote_depth else 'normal'
            block = _text_block(inline, style)
            if lists:
                block['listItem'] = lists[-1]
                block['level'] = len(lists)
            blocks.append(block)
            i += 3 if inline is not None else 2
            continue
        elif kind in ('fence', 'code_block'):
            code = {'_type': 'code', 'code': tok.content.rstrip('\n')}
            language = (tok.info or '').strip().split(' ')[0]
            if language:
                code['language'] = language
            blocks.append(code)
        elif kind == 'hr':
            blocks.append({'_type': 'horizontal-rule'})
        elif kind == 'html_block':
            blocks.append({
                '_type': 'block', 'style': 'normal', 'markDefs': [],
                'children': [{'_type': 'span', 'text': tok.content.rstrip('\n'), 'marks': []}],
            })
        elif kind == 'table_open':
            table, i = _table_block(tokens, i)
            blocks.append(table)

        i += 1

    return blocks
