"""
File Storage Entities

Domain entities for uploaded file management.
"""

from dataclasses import dataclass
from typing import Any

from .formatting import format_size
from .value_objects import FileKind


@dataclass(frozen=True)
class FileDescriptor:
    """
    A stored file resolved from its public identifier.

    Carries the internal id needed for a subsequent raw-content fetch along
    with the descriptive metadata set once at upload.
    """
    internal_id: Any
    short_id: str
    filename: str
    length: int
    content_type: str

    @property
    def kind(self) -> FileKind:
        return FileKind.from_content_type(self.content_type)

    @property
    def size_label(self) -> str:
        return format_size(self.length)


@dataclass(frozen=True)
class FileView:
    """Everything the viewer page needs to render a stored file."""
    short_id: str
    filename: str
    size_label: str
    kind: FileKind
    content_type: str

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor) -> "FileView":
        return cls(
            short_id=descriptor.short_id,
            filename=descriptor.filename,
            size_label=descriptor.size_label,
            kind=descriptor.kind,
            content_type=descriptor.content_type,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for template rendering."""
        return {
            "file_id": self.short_id,
            "filename": self.filename,
            "file_size": self.size_label,
            "file_type": self.kind.value,
            "content_type": self.content_type,
        }
