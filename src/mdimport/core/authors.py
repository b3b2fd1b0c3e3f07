"""Author reference resolution: verify an explicit id, or find-or-create by name"""

import logging

from mdimport.core.document import make_document_id
from mdimport.core.errors import AuthorNotFound, ValidationError
from mdimport.core.models import Author, SlugField
from mdimport.core.utils.retry import with_retry
from mdimport.core.utils.slug import slugify


logger = logging.getLogger(__name__)


class AuthorResolver:
    """Return a stable author document id for frontmatter `authorId` or `author`.

    Name matching is exact and case-sensitive. Results are memoized for the
    resolver's lifetime, so one run asks the store about each author once.
    """

    def __init__(
        self,
        store=None,
        write: bool = False,
        draft: bool = False,
        max_attempts: int = 3,
        base_delay: float = 1.0,
    ):
        if write and store is None:
            raise ValueError("AuthorResolver needs a store in write mode")
        self.store = store
        self.write = write
        self.draft = draft
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._resolved: dict[tuple[str, str], str] = {}

    async def _call(self, fn, context: str):
        return await with_retry(fn, max_attempts=self.max_attempts, base_delay=self.base_delay, context=context)

    async def ensure(self, author_id: str | None = None, author: str | None = None) -> str:
        if author_id:
            key = ("id", str(author_id))
        elif author:
            key = ("name", str(author))
        else:
            raise ValidationError("<frontmatter>", ["missing 'author' or 'authorId'"])

        if key not in self._resolved:
            if author_id:
                self._resolved[key] = await self._verify(str(author_id))
            else:
                self._resolved[key] = await self._find_or_create(str(author))
        return self._resolved[key]

    async def _verify(self, author_id: str) -> str:
        if not self.write:
            logger.info(f"  [dry] would verify author: {author_id}")
            return author_id
        found = await self._call(lambda: self.store.get_document(author_id), f"fetch author {author_id}")
        if not found or not found.get("_id"):
            raise AuthorNotFound(author_id)
        return author_id

    async def _find_or_create(self, name: str) -> str:
        slug = slugify(name)
        author_id = make_document_id("author", slug, self.draft)

        if not self.write:
            logger.info(f"  [dry] would create author: {name} -> {author_id}")
            return author_id

        existing = await self._call(
            lambda: self.store.find_document("author", "name", name),
            f'fetch author by name "{name}"',
        )
        if existing and existing.get("_id"):
            return existing["_id"]

        doc = Author(id=author_id, name=name, slug=SlugField(current=slug))
        await self._call(lambda: self.store.create_if_not_exists(doc.to_sanity()), f'create author "{name}"')
        logger.info(f"  [create] author: {name} -> {author_id}")
        return author_id
