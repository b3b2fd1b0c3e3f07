"""Image asset upload with per-run dedupe and in-flight request coalescing"""

import asyncio
import logging
import mimetypes
from pathlib import Path

from mdimport.core.errors import InvalidImageType
from mdimport.core.models import AssetRecord
from mdimport.core.parse import read_bytes_with_context
from mdimport.core.utils.retry import with_retry
from mdimport.core.utils.slug import slugify


logger = logging.getLogger(__name__)

VALID_IMAGE_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "image/avif",
)

# Not registered by every platform's mime.types
mimetypes.add_type("image/webp", ".webp")
mimetypes.add_type("image/avif", ".avif")
mimetypes.add_type("image/svg+xml", ".svg")


def validate_image_type(path: Path) -> str:
    """Return the file's media type, or raise InvalidImageType if it is not an allowed image."""
    content_type = mimetypes.guess_type(str(path))[0] or "application/octet-stream"
    if content_type not in VALID_IMAGE_TYPES:
        raise InvalidImageType(path, content_type, list(VALID_IMAGE_TYPES))
    return content_type


class AssetUploader:
    """Resolve local image paths to asset ids, uploading each distinct path at most once.

    Completed uploads are cached for the uploader's lifetime. While an upload
    is running, later callers for the same path await the same task instead
    of starting their own. This relies on a single event loop; it is not a
    thread-safe lock.

    With write=False nothing is sent: a stable fake id derived from the
    filename is returned so dry runs log consistent references.
    """

    def __init__(self, store=None, write: bool = False, max_attempts: int = 3, base_delay: float = 1.0):
        if write and store is None:
            raise ValueError("AssetUploader needs a store in write mode")
        self.store = store
        self.write = write
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.uploads = 0
        self._cache: dict[Path, AssetRecord] = {}
        self._inflight: dict[Path, asyncio.Task] = {}

    def cached(self, path: Path) -> AssetRecord | None:
        return self._cache.get(Path(path))

    async def resolve(self, path: Path) -> AssetRecord:
        path = Path(path)
        if path in self._cache:
            return self._cache[path]

        task = self._inflight.get(path)
        if task is None:
            task = asyncio.ensure_future(self._upload(path))
            self._inflight[path] = task
            task.add_done_callback(lambda _t, p=path: self._inflight.pop(p, None))
        return await asyncio.shield(task)

    async def _upload(self, path: Path) -> AssetRecord:
        content_type = validate_image_type(path)
        data = read_bytes_with_context(path, "image asset")
        filename = path.name

        if not self.write:
            record = AssetRecord(path=path, asset_id=f"dry.asset.{slugify(filename)}")
            self._cache[path] = record
            logger.info(f"  [dry] would upload image asset: {filename}")
            return record

        self.uploads += 1
        asset_id = await with_retry(
            lambda: self.store.upload_image(data, filename, content_type),
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            context=f"upload {filename}",
        )
        record = AssetRecord(path=path, asset_id=asset_id)
        self._cache[path] = record
        logger.info(f"  [upload] {filename} -> {asset_id}")
        return record
