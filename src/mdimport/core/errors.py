"""Exception hierarchy for per-file import failures and run-level configuration errors"""

from pathlib import Path


class MdImportError(Exception):
    """Base class for errors raised while importing a post."""


class ConfigurationError(MdImportError):
    """Settings are missing or invalid; fatal to the whole run."""


class ValidationError(MdImportError):
    """Frontmatter failed validation. Carries every violation, not just the first."""

    def __init__(self, path: Path | str, errors: list[str]):
        self.path = str(path)
        self.errors = list(errors)
        super().__init__(f"Frontmatter validation failed in {self.path}: {', '.join(self.errors)}")


class FileNotFound(MdImportError):
    """A referenced file (post, cover or inline image) does not exist."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = str(path) if path is not None else None
        super().__init__(message)


class ReadError(MdImportError):
    """A file exists but could not be read."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = str(path) if path is not None else None
        super().__init__(message)


class InvalidImageType(MdImportError):
    """An image file's media type is not on the allow-list."""

    def __init__(self, path: Path | str, content_type: str, allowed: list[str]):
        self.path = str(path)
        self.content_type = content_type
        super().__init__(
            f'Invalid image type "{content_type}" for file: {self.path}. '
            f"Allowed types: {', '.join(allowed)}"
        )


class AuthorNotFound(MdImportError):
    """An explicit authorId does not exist in the dataset."""

    def __init__(self, author_id: str):
        self.author_id = author_id
        super().__init__(f"authorId not found: {author_id}")


class UnresolvedPlaceholderError(MdImportError):
    """An image placeholder survived splicing (split across spans by the converter)."""

    def __init__(self, tokens: list[str]):
        self.tokens = list(tokens)
        super().__init__(f"Unresolved image placeholder(s) in body: {', '.join(self.tokens)}")


class TransientNetworkError(MdImportError):
    """Retryable upstream failure: 5xx, connection reset/refused/timeout, DNS, dropped socket."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class FatalWriteError(MdImportError):
    """Non-retryable upstream failure (4xx, malformed response)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
