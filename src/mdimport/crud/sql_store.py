"""SQL-backed content store: a local dataset for offline imports and tests"""

from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime
from pathlib import PurePath
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import Session, SQLModel, create_engine, select

from mdimport.core.errors import FatalWriteError
from mdimport.core.utils.hashing import sha256_bytes
from mdimport.crud.models import AssetRow, DocumentRow
from mdimport.crud.store import ContentStore


def make_engine(db_url: str):
    return create_engine(db_url, echo=False)


def create_tables(engine) -> None:
    SQLModel.metadata.create_all(engine)


def asset_id_for(data: bytes, filename: str) -> str:
    """Content-addressed id in Sanity's shape: image-<hash>-<ext>."""
    ext = PurePath(filename).suffix.lstrip(".").lower() or "bin"
    return f"image-{sha256_bytes(data)[:40]}-{ext}"


def _slug_of(doc: dict[str, Any]) -> str | None:
    slug = doc.get("slug")
    if isinstance(slug, dict):
        return slug.get("current")
    return slug


class SQLStore(ContentStore):
    """ContentStore over a SQLModel engine. Each call runs in its own committed session."""

    def __init__(self, engine):
        self.engine = engine
        create_tables(engine)

    @classmethod
    def from_url(cls, db_url: str) -> "SQLStore":
        return cls(make_engine(db_url))

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """Session whose database errors surface as FatalWriteError."""
        try:
            with Session(self.engine) as session:
                yield session
        except SQLAlchemyError as e:
            raise FatalWriteError(f"SQL store error: {e}") from e

    async def upload_image(self, data: bytes, filename: str, content_type: str) -> str:
        """Store the bytes once; identical content under any filename returns the first row's id."""
        digest = sha256_bytes(data)
        with self._session() as session:
            existing = session.exec(select(AssetRow).where(AssetRow.hash == digest)).first()
            if existing is not None:
                return existing.id
            asset_id = asset_id_for(data, filename)
            session.add(AssetRow(
                id=asset_id,
                hash=digest,
                filename=filename,
                content_type=content_type,
                size=len(data),
                data=data,
            ))
            session.commit()
        return asset_id

    async def get_document(self, doc_id: str) -> dict[str, Any] | None:
        with self._session() as session:
            row = session.get(DocumentRow, doc_id)
            return dict(row.data) if row else None

    async def find_document(self, doc_type: str, field: str, value: Any) -> dict[str, Any] | None:
        with self._session() as session:
            rows = session.exec(
                select(DocumentRow).where(DocumentRow.type == doc_type).order_by(DocumentRow.created_at)
            ).all()
            for row in rows:
                if row.data.get(field) == value:
                    return dict(row.data)
        return None

    async def create_if_not_exists(self, doc: dict[str, Any]) -> dict[str, Any]:
        with self._session() as session:
            row = session.get(DocumentRow, doc["_id"])
            if row is not None:
                return dict(row.data)
            session.add(DocumentRow(id=doc["_id"], type=doc["_type"], slug=_slug_of(doc), data=doc))
            session.commit()
        return doc

    async def create_or_replace(self, doc: dict[str, Any]) -> dict[str, Any]:
        with self._session() as session:
            row = session.get(DocumentRow, doc["_id"])
            if row is None:
                row = DocumentRow(id=doc["_id"], type=doc["_type"], slug=_slug_of(doc), data=doc)
            else:
                row.type = doc["_type"]
                row.slug = _slug_of(doc)
                row.data = doc
                row.updated_at = datetime.now()
                flag_modified(row, "data")
            session.add(row)
            session.commit()
        return doc

    def count_documents(self, doc_type: str | None = None) -> int:
        with self._session() as session:
            stmt = select(DocumentRow)
            if doc_type:
                stmt = stmt.where(DocumentRow.type == doc_type)
            return len(session.exec(stmt).all())

    def count_assets(self) -> int:
        with self._session() as session:
            return len(session.exec(select(AssetRow)).all())
