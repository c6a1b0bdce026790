"""
UploadedFile model describing a file-like value under validation.
"""

import mimetypes
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UploadedFile(BaseModel):
    """
    A file-like value (typically an upload) placed in the data bag.

    The engine moves every UploadedFile out of the scalar data into the file
    bag when it is constructed. Size rules measure it in kilobytes.

    Attributes:
        path: Location of the stored file ("" when the upload produced no file)
        size: Size in bytes
        valid: Whether the upload completed successfully
        mime_type: Declared MIME type, guessed from the name when omitted
        original_name: Client-side file name
    """

    model_config = ConfigDict(frozen=True)

    path: str
    size: int = Field(0, ge=0)
    valid: bool = True
    mime_type: str | None = None
    original_name: str | None = None

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        mime_type: str | None = None,
        original_name: str | None = None,
    ) -> "UploadedFile":
        """
        Describe a file on disk.

        A path that does not point to a regular file gives an invalid upload
        rather than an error, so validation can report it.
        """
        file_path = Path(path)
        if not file_path.is_file():
            return cls(path=str(file_path), size=0, valid=False,
                       mime_type=mime_type, original_name=original_name)

        return cls(
            path=str(file_path),
            size=file_path.stat().st_size,
            valid=True,
            mime_type=mime_type,
            original_name=original_name or file_path.name,
        )

    def is_valid(self) -> bool:
        return self.valid

    def guessed_mime_type(self) -> str | None:
        if self.mime_type:
            return self.mime_type
        mime_type, _ = mimetypes.guess_type(self.original_name or self.path)
        return mime_type

    def guess_extensions(self) -> list[str]:
        """Extensions (without the dot) registered for the file's MIME type."""
        mime_type = self.guessed_mime_type()
        if not mime_type:
            return []
        return [ext.lstrip(".") for ext in mimetypes.guess_all_extensions(mime_type, strict=False)]


def is_file_like(value: Any) -> bool:
    """Default file classifier: only UploadedFile values are file-like."""
    return isinstance(value, UploadedFile)
