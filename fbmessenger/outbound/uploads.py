"""
fbmessenger/outbound/uploads.py

Wraps a file for `multipart/form-data` uploads to the Graph API.
The source is either an open binary stream or a path to the file.
Paths are opened lazily, on first access of `stream`.
"""

from __future__ import annotations

import mimetypes
import os
from typing import BinaryIO, Optional, Union

from fbmessenger.outbound.errors import MessengerError

UploadSource = Union[BinaryIO, str, "os.PathLike[str]"]


class Upload:
    def __init__(
        self,
        name: str,
        source: UploadSource,
        content_type: Optional[str] = None,
    ) -> None:
        if not name:
            raise MessengerError.configuration("Invalid parameters for Upload: name missing!")

        if isinstance(source, (str, os.PathLike)):
            self._path: Optional[str] = os.fspath(source)
            self._stream: Optional[BinaryIO] = None
        elif hasattr(source, "read"):
            self._path = None
            self._stream = source
        else:
            raise MessengerError.configuration(
                "Invalid parameters for Upload: source must be a stream or a path."
            )

        self.name = name
        self.content_type = (
            content_type
            or mimetypes.guess_type(name)[0]
            or "application/octet-stream"
        )

    @property
    def stream(self) -> BinaryIO:
        if self._stream is None:
            try:
                self._stream = open(self._path, "rb")
            except OSError as e:
                raise MessengerError.configuration(f"Cannot open upload {self.name}: {e}") from e
        elif self._stream.closed:
            raise MessengerError.configuration(f"Upload {self.name} was already sent or closed")
        return self._stream

    @property
    def closed(self) -> bool:
        return self._stream is not None and self._stream.closed

    def as_file_part(self) -> tuple[str, BinaryIO, str]:
        return self.name, self.stream, self.content_type

    def close(self) -> None:
        if self._stream is not None and not self._stream.closed:
            self._stream.close()

    def __enter__(self) -> "Upload":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Upload(name={self.name!r}, content_type={self.content_type!r})"
