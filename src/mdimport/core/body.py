"""Markdown body -> Portable Text with inline images uploaded and spliced back in place"""

import asyncio
from pathlib import Path

from mdimport.core.assets import AssetUploader
from mdimport.core.document import image_block
from mdimport.core.errors import FileNotFound
from mdimport.core.extract.convert import markdown_to_blocks
from mdimport.core.extract.images import extract_inline_images
from mdimport.core.parse import resolve_path
from mdimport.core.splice import (
    assert_no_placeholders,
    ensure_keys,
    filter_unsupported_blocks,
    splice_image_blocks,
)


async def markdown_to_portable_text(
    md_path: Path,
    markdown: str,
    uploader: AssetUploader,
    parser_config: str = 'gfm-like',
    ) -> list[dict]:
    """Extract images -> convert -> upload images concurrently -> splice image blocks.

    Inline image paths resolve against md_path's directory. Every path is
    checked before any upload starts, so a missing image fails the post
    without partial uploads.
    """
    rewritten, images = extract_inline_images(markdown, parser_config=parser_config)

    blocks = filter_unsupported_blocks(ensure_keys(markdown_to_blocks(rewritten, parser_config)))
    if not images:
        return blocks

    resolved = []
    for img in images:
        abs_path = resolve_path(md_path, img.src)
        if abs_path is None or not abs_path.exists():
            raise FileNotFound(f"Inline image not found: {img.src} (resolved: {abs_path})", abs_path)
        resolved.append((img, abs_path))

    # Every upload settles before the first failure is raised.
    records = await asyncio.gather(*(uploader.resolve(p) for _, p in resolved), return_exceptions=True)
    for record in records:
        if isinstance(record, BaseException):
            raise record

    token_to_image = {
        img.token: image_block(record.asset_id, img.alt or "Image", img.caption or "")
        for (img, _), record in zip(resolved, records)
    }

    body = filter_unsupported_blocks(ensure_keys(splice_image_blocks(blocks, token_to_image)))
    assert_no_placeholders(body, token_to_image)
    return body
