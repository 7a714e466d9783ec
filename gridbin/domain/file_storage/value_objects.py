"""
File Storage Value Objects

Immutable value objects for type safety and validation.
"""

from dataclasses import dataclass
from enum import Enum
import string

URL_SAFE_ALPHABET = frozenset(string.ascii_letters + string.digits + "-_")

SHORT_ID_LENGTH = 5
DELETE_TOKEN_LENGTH = 10

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class InvalidIdentifierError(ValueError):
    """Raised when a short id or delete token has the wrong shape."""
    pass


def _is_url_safe(value: str, length: int) -> bool:
    if not value or not isinstance(value, str):
        return False
    return len(value) == length and all(c in URL_SAFE_ALPHABET for c in value)


@dataclass(frozen=True)
class ShortId:
    """
    Public identifier of a stored file.

    Exactly five characters from the URL-safe base64 alphabet.
    """
    value: str

    def __post_init__(self):
        if not _is_url_safe(self.value, SHORT_ID_LENGTH):
            raise InvalidIdentifierError(
                f"Invalid short id: must be {SHORT_ID_LENGTH} URL-safe characters"
            )

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return _is_url_safe(value, SHORT_ID_LENGTH)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DeleteToken:
    """
    Secret token authorizing deletion of a stored file.

    Exactly ten characters from the URL-safe base64 alphabet.
    """
    value: str

    def __post_init__(self):
        if not _is_url_safe(self.value, DELETE_TOKEN_LENGTH):
            raise InvalidIdentifierError(
                f"Invalid delete token: must be {DELETE_TOKEN_LENGTH} URL-safe characters"
            )

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return _is_url_safe(value, DELETE_TOKEN_LENGTH)

    def __str__(self) -> str:
        return self.value


class FileKind(Enum):
    """Viewer classification of a stored file, derived from its content type."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"

    @classmethod
    def from_content_type(cls, content_type: str) -> "FileKind":
        """
        Classify a MIME type by its top-level prefix.

        Args:
            content_type: MIME type as stored, possibly with parameters

        Returns:
            IMAGE, VIDEO or AUDIO for the matching prefix, FILE otherwise
        """
        content_type = content_type or ""
        if content_type.startswith("image/"):
            return cls.IMAGE
        if content_type.startswith("video/"):
            return cls.VIDEO
        if content_type.startswith("audio/"):
            return cls.AUDIO
        return cls.FILE


def normalize_content_type(content_type: str) -> str:
    """Return the content type, or the octet-stream default when blank."""
    if content_type is None or not content_type.strip():
        return DEFAULT_CONTENT_TYPE
    return content_type
