"""Example upload adapter.

Use this module as a reference when implementing new transport adapters.
Implement BaseUploadAdapter and register the adapter in UploadAdapterFactory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.exceptions import UploadError
from imageupload.upload.models import UploadResponse

if TYPE_CHECKING:
    from imageupload.upload.loader import FileLoader


class ExampleUploadAdapter(BaseUploadAdapter):
    """Example adapter that "uploads" by echoing a location for the file name.

    No network calls. Useful for local development, tests, and as a template
    for building real transport adapters.
    """

    BASE_URL: ClassVar[str] = "https://uploads.example.invalid"

    def __init__(self) -> None:
        self.aborted = False

    async def upload(self, loader: FileLoader) -> UploadResponse:
        file = await loader.file
        if self.aborted:
            raise UploadError("Upload aborted")
        loader.update_progress(file.size or 0, file.size or 0)
        return {"default": f"{self.BASE_URL}/{loader.id}/{file.name}"}

    def abort(self, loader: FileLoader) -> None:
        _ = loader
        self.aborted = True
