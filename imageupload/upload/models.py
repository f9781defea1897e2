import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class LoaderStatus(str, Enum):
    IDLE = "idle"
    READING = "reading"
    UPLOADING = "uploading"
    ABORTED = "aborted"
    ERROR = "error"


@dataclass(eq=False)
class FileObject:
    """A file handle: either in-memory bytes or a path read on demand.

    Compared and hashed by identity so it can key the file repository.
    """

    name: str
    content_type: str = ""
    data: bytes | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: Path) -> "FileObject":
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content_type=content_type or "", path=path)

    @property
    def size(self) -> int | None:
        if self.data is not None:
            return len(self.data)
        return None


UploadResponse = dict[str | int, str]
