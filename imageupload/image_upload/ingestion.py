"""Paste/drop ingestion.

Two entry points on the clipboard pipeline, both ahead of the default
handlers:

* ``input``: a drop/paste carrying image files inserts one placeholder per
  file and stops the event;
* ``input_transformation``: inline ``data:`` and ``blob:`` images in pasted
  markup are turned into placeholders in place. Each one gets a file task
  (decode or fetch) owned by its loader, so a failing image only takes its
  own placeholder down.
"""

import asyncio
from collections.abc import Awaitable, Callable

from imageupload.clipboard.blobs import Blob, is_blob_url
from imageupload.clipboard.pipeline import (
    ClipboardInputData,
    ClipboardPipeline,
    InputTransformationData,
)
from imageupload.config.settings import Settings
from imageupload.document.document import Document
from imageupload.document.model import UPLOAD_ID, Position
from imageupload.events.emitter import EventInfo
from imageupload.image_upload.command import ImageUploadCommand
from imageupload.image_upload.utils import (
    decode_data_uri,
    extension_for,
    is_image_type,
    is_local_image_source,
)
from imageupload.logging.logger import Log
from imageupload.upload.exceptions import FetchError, SchemaRejection
from imageupload.upload.file_repository import FileRepository
from imageupload.upload.models import FileObject

Fetch = Callable[[str], Awaitable[Blob]]
FileConstructor = Callable[..., FileObject]


class PasteIngestion:
    """Turns pasted or dropped images into upload placeholders."""

    def __init__(
        self,
        document: Document,
        clipboard: ClipboardPipeline,
        repository: FileRepository,
        command: ImageUploadCommand,
        settings: Settings,
        *,
        fetch: Fetch,
        file_constructor: FileConstructor | None = FileObject,
    ) -> None:
        self._document = document
        self._repository = repository
        self._command = command
        self._settings = settings
        self._fetch = fetch
        self.file_constructor = file_constructor
        clipboard.on("input", self._on_input)
        clipboard.on("input_transformation", self._on_input_transformation)

    def _on_input(self, info: EventInfo, data: ClipboardInputData) -> None:
        data_transfer = data.data_transfer
        if self._settings.ignore_files_with_html and data_transfer.get_data("text/html"):
            return
        images = [
            file
            for file in data_transfer.files
            if file is not None and is_image_type(file.content_type, self._settings.image_types)
        ]
        if not images:
            return

        info.stop()
        position = self._document.find_optimal_insertion_position(data.target)
        for file in images:
            try:
                node = self._command.insert_placeholder(file, position)
            except SchemaRejection as exc:
                Log.debug(f"Skipping dropped images: {exc}")
                return
            if node is None:
                continue
            index = self._document.index_of(node)
            if index is not None:
                position = Position(index + 1)

    def _on_input_transformation(self, info: EventInfo, data: InputTransformationData) -> None:
        _ = info
        candidates = [
            node
            for node in data.content
            if node.is_image
            and not node.get(UPLOAD_ID)
            and is_local_image_source(node.get("src", ""))
        ]
        if not candidates:
            return
        target = self._document.find_optimal_insertion_position(data.target)
        if not self._command.can_insert_at(target):
            return

        for node in candidates:
            file_task = asyncio.ensure_future(self._create_file(node.get("src")))
            loader = self._repository.create_loader(file_task)
            if loader is None:
                file_task.cancel()
                continue
            node.attributes["src"] = ""
            node.attributes[UPLOAD_ID] = loader.id
            Log.info("Inline image queued for upload", upload_id=loader.id)

    async def _create_file(self, src: str) -> FileObject:
        """Decode or fetch ``src`` and build a file object from it.

        Raises:
            FetchError: if the data cannot be obtained or no file can be built.
        """
        if is_blob_url(src):
            try:
                blob = await self._fetch(src)
            except FetchError:
                raise
            except Exception as exc:
                raise FetchError(f"Cannot fetch {src}: {exc}") from exc
        else:
            blob = decode_data_uri(src)

        if self.file_constructor is None:
            raise FetchError("Creating files is not supported")
        extension = extension_for(blob.content_type, self._settings.default_file_extension)
        try:
            return self.file_constructor(
                name=f"image.{extension}",
                content_type=blob.content_type or f"image/{extension}",
                data=blob.data,
            )
        except Exception as exc:
            raise FetchError(f"Cannot create a file: {exc}") from exc
