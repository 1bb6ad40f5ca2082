import mimetypes
import posixpath
from dataclasses import dataclass
from typing import Optional, Protocol


class MimeType:
    PDF = "application/pdf"
    JPEG = "image/jpeg"
    PNG = "image/png"
    PLAIN_TEXT = "text/plain"
    CSV = "text/csv"
    ZIP = "application/zip"


# mimetypes.guess_extension("image/jpeg") varies by platform
_EXTENSIONS = {
    MimeType.PDF: ".pdf",
    MimeType.JPEG: ".jpg",
    MimeType.PNG: ".png",
    MimeType.PLAIN_TEXT: ".txt",
    MimeType.CSV: ".csv",
    MimeType.ZIP: ".zip",
}


def extension_for(mime_type: str) -> str:
    return _EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type) or ""


@dataclass(frozen=True)
class Blob:
    name: str
    content: bytes
    content_type: str


@dataclass(frozen=True)
class FileHandle:
    file_id: str
    name: str
    content: bytes

    def as_blob(self, mime_type: str) -> Blob:
        """
        Render the stored file as a blob of the requested MIME type.
        The blob name keeps the stored stem and takes the extension of mime_type.
        """
        stem, _ = posixpath.splitext(self.name)
        return Blob(
            name=f"{stem or self.file_id}{extension_for(mime_type)}",
            content=self.content,
            content_type=mime_type,
        )


@dataclass(frozen=True)
class FileLookup:
    file_id: str
    handle: Optional[FileHandle] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.handle is not None


class FileStore(Protocol):
    def get_file(self, file_id: str) -> FileLookup:
        ...
