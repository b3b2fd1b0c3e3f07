"""Records passed between import stages, plus the document shapes written to the dataset"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class ImageRef:
    """An inline image pulled out of the Markdown body and replaced by token."""
    token:   str
    alt:     str
    src:     str                # as written in the Markdown, relative or absolute
    caption: str = ""


@dataclass(frozen=True)
class AssetRecord:
    """A local image file and the remote asset id it was uploaded as."""
    path:     Path
    asset_id: str


@dataclass
class ParsedPost:
    """Internal parse result for one source file; not persisted."""
    path:        Path
    frontmatter: dict[str, Any]
    body:        str            # Markdown with frontmatter stripped


class _SanityModel(BaseModel):
    """Base for documents using Sanity's underscore-prefixed system fields."""
    model_config = ConfigDict(populate_by_name=True)

    def to_sanity(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Reference(_SanityModel):
    type: Literal["reference"] = Field(default="reference", alias="_type")
    ref:  str = Field(..., alias="_ref")


class SlugField(_SanityModel):
    type:    Literal["slug"] = Field(default="slug", alias="_type")
    current: str


class Author(_SanityModel):
    id:   str = Field(..., alias="_id")
    type: Literal["author"] = Field(default="author", alias="_type")
    name: str
    slug: SlugField


class Post(_SanityModel):
    """The final importable unit; _id is derived from the slug so re-imports upsert."""
    id:           str = Field(..., alias="_id")
    type:         Literal["post"] = Field(default="post", alias="_type")
    title:        str
    slug:         SlugField
    author:       Reference
    main_image:   dict[str, Any] = Field(..., alias="mainImage")
    published_at: str = Field(..., alias="publishedAt")
    excerpt:      Optional[str] = None
    body:         list[dict[str, Any]] = []
    categories:   list[str] = []


@dataclass
class FileOutcome:
    """Result of importing one source file."""
    path:     Path
    status:   Literal["ok", "dry", "skipped", "failed"]
    slug:     Optional[str] = None
    doc_id:   Optional[str] = None
    error:    Optional[str] = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class ImportSummary:
    """Aggregate counts over a run; dry-run imports count as succeeded."""
    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.status in ("ok", "dry"))

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "skipped")

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "failed")
