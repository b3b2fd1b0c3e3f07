"""Abstract content store: the dataset posts, authors and image assets are written to"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any


class ContentStore(ABC):
    """Async sink for asset uploads, id/field lookups and id-keyed document writes."""

    @abstractmethod
    async def upload_image(self, data: bytes, filename: str, content_type: str) -> str:
        """Store image bytes and return the asset id."""
        raise NotImplementedError

    @abstractmethod
    async def get_document(self, doc_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    async def find_document(self, doc_type: str, field: str, value: Any) -> dict[str, Any] | None:
        """Return the first document of doc_type whose top-level field equals value."""
        raise NotImplementedError

    @abstractmethod
    async def create_if_not_exists(self, doc: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    async def create_or_replace(self, doc: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> "ContentStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
