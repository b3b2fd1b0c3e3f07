"""Database table definitions for a local dataset of documents and image assets"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Column, DateTime, JSON, LargeBinary, String, Text
from sqlmodel import Field, SQLModel


class DocumentRow(SQLModel, table=True):
    """A dataset document (post, author) stored as its full JSON body, keyed by _id"""
    __tablename__ = "documents"
    id: str = Field(..., sa_column=Column(String(255), primary_key=True))
    type: str = Field(..., index=True, nullable=False)
    slug: Optional[str] = Field(default=None, index=True)
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class AssetRow(SQLModel, table=True):
    """An uploaded image; the id is derived from the content hash so identical bytes share a row"""
    __tablename__ = "assets"
    id: str = Field(..., sa_column=Column(String(255), primary_key=True))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False, unique=True))
    filename: str = Field(..., sa_column=Column(Text, nullable=False))
    content_type: str = Field(..., nullable=False)
    size: int = Field(..., nullable=False)
    data: bytes = Field(..., sa_column=Column(LargeBinary, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
