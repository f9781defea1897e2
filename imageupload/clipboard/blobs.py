import asyncio
from dataclasses import dataclass
from uuid import uuid4

from imageupload.upload.exceptions import FetchError

BLOB_SCHEME = "blob:"


@dataclass(frozen=True)
class Blob:
    data: bytes
    content_type: str = ""


class BlobRegistry:
    """Ephemeral ``blob:`` references to in-memory image data.

    References live until revoked; fetching a revoked or unknown reference
    fails with ``FetchError``.
    """

    def __init__(self, origin: str = "imageupload") -> None:
        self._origin = origin
        self._blobs: dict[str, Blob] = {}

    def create_url(self, data: bytes, content_type: str = "") -> str:
        url = f"{BLOB_SCHEME}{self._origin}/{uuid4()}"
        self._blobs[url] = Blob(data=data, content_type=content_type)
        return url

    def revoke(self, url: str) -> None:
        self._blobs.pop(url, None)

    async def fetch(self, url: str) -> Blob:
        # Resolution is asynchronous like any other fetch.
        await asyncio.sleep(0)
        blob = self._blobs.get(url)
        if blob is None:
            raise FetchError(f"Cannot fetch {url}")
        return blob


def is_blob_url(src: str) -> bool:
    return src.startswith(BLOB_SCHEME)
