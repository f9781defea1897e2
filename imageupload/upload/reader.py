import asyncio
import base64

from imageupload.upload.exceptions import ReadError
from imageupload.upload.models import FileObject


def to_data_uri(data: bytes, content_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


class FileReader:
    """Reads a file object into a locally renderable ``data:`` URI."""

    def __init__(self) -> None:
        self.aborted = False

    async def read(self, file: FileObject) -> str:
        """Read file bytes and encode them as a preview.

        Raises:
            ReadError: if the file has no content or cannot be read from disk.
        """
        data = await self._load(file)
        return to_data_uri(data, file.content_type)

    def abort(self) -> None:
        # Thread reads cannot be interrupted; the loader disregards the result.
        self.aborted = True

    @staticmethod
    async def _load(file: FileObject) -> bytes:
        if file.data is not None:
            return file.data
        if file.path is None:
            raise ReadError(f"File {file.name} has no content")
        try:
            return await asyncio.to_thread(file.path.read_bytes)
        except OSError as exc:
            raise ReadError(f"Cannot read {file.path}: {exc.strerror or exc}") from exc
