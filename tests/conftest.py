"""Root test configuration: shared fake store, post-writing helper, logger cleanup"""

import asyncio
import copy
import logging
from pathlib import Path

import pytest
import yaml

from mdimport.core.utils.hashing import sha256_bytes
from mdimport.crud.store import ContentStore


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


class RecordingStore(ContentStore):
    """In-memory ContentStore that records every call."""

    def __init__(self, upload_delay: float = 0.01):
        self.docs: dict[str, dict] = {}
        self.uploads: list[str] = []
        self.calls: list[str] = []
        self.upload_delay = upload_delay

    async def upload_image(self, data, filename, content_type):
        self.calls.append("upload_image")
        self.uploads.append(filename)
        await asyncio.sleep(self.upload_delay)
        return f"image-{sha256_bytes(data)[:12]}-{Path(filename).suffix.lstrip('.')}"

    async def get_document(self, doc_id):
        self.calls.append("get_document")
        doc = self.docs.get(doc_id)
        return {"_id": doc["_id"]} if doc else None

    async def find_document(self, doc_type, field, value):
        self.calls.append("find_document")
        for doc in self.docs.values():
            if doc.get("_type") == doc_type and doc.get(field) == value:
                return {"_id": doc["_id"]}
        return None

    async def create_if_not_exists(self, doc):
        self.calls.append("create_if_not_exists")
        self.docs.setdefault(doc["_id"], copy.deepcopy(doc))
        return doc

    async def create_or_replace(self, doc):
        self.calls.append("create_or_replace")
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return doc


@pytest.fixture(name="store")
def store_fixture():
    return RecordingStore()


@pytest.fixture(name="write_post")
def write_post_fixture(tmp_path):
    """Write a post (frontmatter + body) and any images it names; returns the post path."""

    def _write(name: str, frontmatter: dict, body: str = "Body text.\n", images: tuple = ("cover.png",)) -> Path:
        for image in images:
            p = tmp_path / image
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(PNG_BYTES + image.encode())
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"---\n{yaml.safe_dump(frontmatter, sort_keys=False)}---\n\n{body}", encoding="utf-8")
        return path

    return _write


@pytest.fixture(name="valid_fm")
def valid_fm_fixture():
    return {
        "title": "Hello World",
        "author": "Jane Doe",
        "mainImage": "./cover.png",
        "mainImageAlt": "A cover",
        "publishedAt": "2025-01-15T10:00:00Z",
    }


@pytest.fixture(autouse=True)
def reset_mdimport_logger():
    """Drop stream handlers the CLI installs so later tests don't write to closed buffers."""
    yield
    logger = logging.getLogger("mdimport")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
