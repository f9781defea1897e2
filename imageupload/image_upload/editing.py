import asyncio
from functools import partial

from imageupload.config.settings import Settings
from imageupload.document.document import Document, Writer
from imageupload.document.model import UPLOAD_ID, UPLOAD_STATUS, Batch, Node
from imageupload.events.emitter import EventInfo
from imageupload.image_upload.utils import responsive_attributes
from imageupload.logging.logger import Log
from imageupload.notification.notification import Notification
from imageupload.upload.exceptions import FetchError, LoaderAborted, ReadError, UploadError
from imageupload.upload.file_repository import FileRepository
from imageupload.upload.loader import FileLoader
from imageupload.upload.models import LoaderStatus, UploadResponse


class ImageUploadEditing:
    """Keeps placeholder image nodes and their loaders in step.

    * placeholder inserted -> read, then upload;
    * one placeholder per loader; any other node carrying the same id is
      stripped, and removing it leaves the upload alone;
    * read/upload resolved -> mirror preview, status and final locations
      onto the node, but only while the loader is still live;
    * placeholder removed by an edit -> abort the loader and make the
      detached node inert so undo cannot bring back a pending upload;
    * failure -> notify, then strip and remove the placeholder outside the
      undo history.

    Moves are ignored.
    """

    FAILURE_TITLE = "Upload failed"

    def __init__(
        self,
        document: Document,
        repository: FileRepository,
        notification: Notification,
        settings: Settings,
    ) -> None:
        self._document = document
        self._repository = repository
        self._notification = notification
        self._sizes = settings.responsive_sizes
        self._tasks: set[asyncio.Task[None]] = set()
        self._owners: dict[str, Node] = {}
        document.on("change", self._on_document_change)

    @property
    def pending_tasks(self) -> list[asyncio.Task[None]]:
        return list(self._tasks)

    async def wait_until_settled(self) -> None:
        """Wait for every upload started so far, and those they start.

        Exceptions other than upload failures propagate from here.
        """
        while self._tasks:
            await asyncio.gather(*self._tasks)

    def _on_document_change(self, info: EventInfo, batch: Batch) -> None:
        _ = info
        for change in batch.changes:
            if not change.node.is_image:
                continue
            if change.type == "insert":
                self._on_placeholder_inserted(change.node)
            elif change.type == "remove":
                self._on_placeholder_removed(change.node)

    def _on_placeholder_inserted(self, node: Node) -> None:
        upload_id = node.get(UPLOAD_ID)
        if not upload_id or not self._document.contains(node):
            return
        loader = self._repository.get_loader(upload_id)
        if loader is None:
            # Stale placeholder, e.g. brought back by undo.
            self._document.change(partial(self._strip, node), undoable=False)
            return
        owner = self._owners.get(upload_id)
        if owner is not None and owner is not node:
            Log.warning("Image carries the id of another upload", upload_id=upload_id)
            self._document.change(partial(self._strip, node), undoable=False)
            return
        if loader.status is LoaderStatus.IDLE:
            self._read_and_upload(loader, node)

    def _on_placeholder_removed(self, node: Node) -> None:
        upload_id = node.get(UPLOAD_ID)
        if not upload_id or self._document.contains(node):
            return
        owner = self._owners.get(upload_id)
        if owner is not None and owner is not node:
            self._document.change(partial(self._strip, node), undoable=False)
            return
        Log.info("Placeholder removed during upload", upload_id=upload_id)
        self._document.change(partial(self._strip, node), undoable=False)
        loader = self._repository.get_loader(upload_id)
        if loader is not None:
            loader.abort()

    def _read_and_upload(self, loader: FileLoader, node: Node) -> asyncio.Task[None]:
        self._owners[loader.id] = node
        read = loader.read()
        self._document.change(
            lambda writer: writer.set_attribute(node, UPLOAD_STATUS, LoaderStatus.READING.value),
            undoable=False,
        )
        task = asyncio.ensure_future(self._upload_placeholder(loader, node, read))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _upload_placeholder(
        self,
        loader: FileLoader,
        node: Node,
        read: "asyncio.Task[str]",
    ) -> None:
        try:
            data = await read
            self._ensure_live(loader)
            self._document.change(partial(self._mark_uploading, node, data), undoable=False)
            response = await loader.upload()
            self._ensure_live(loader)
            self._document.change(partial(self._apply_response, node, response), undoable=False)
            Log.info("Image uploaded", upload_id=loader.id, src=response["default"])
        except LoaderAborted:
            Log.info("Image upload aborted", upload_id=loader.id)
            self._discard(loader, node)
        except FetchError as exc:
            Log.warning(f"Pasted image could not be converted: {exc}", upload_id=loader.id)
            self._discard(loader, node)
        except (ReadError, UploadError) as exc:
            Log.error(f"Image upload failed: {exc}", upload_id=loader.id)
            self._notification.show_warning(str(exc), title=self.FAILURE_TITLE, namespace="upload")
            self._discard(loader, node)
        finally:
            self._repository.destroy_loader(loader)
            self._owners.pop(loader.id, None)

    def _ensure_live(self, loader: FileLoader) -> None:
        if not self._repository.is_live(loader):
            raise LoaderAborted(f"Upload {loader.id} is no longer live")

    def _discard(self, loader: FileLoader, node: Node) -> None:
        def remove(writer: Writer) -> None:
            # Already made inert by a user removal (or restored inert by undo).
            if node.get(UPLOAD_ID) != loader.id:
                return
            self._strip(node, writer)
            writer.remove(node)

        self._document.change(remove, undoable=False)

    @staticmethod
    def _mark_uploading(node: Node, data: str, writer: Writer) -> None:
        writer.set_attribute(node, "src", data)
        writer.set_attribute(node, UPLOAD_STATUS, LoaderStatus.UPLOADING.value)

    def _apply_response(self, node: Node, response: UploadResponse, writer: Writer) -> None:
        writer.set_attribute(node, "src", response["default"])
        writer.set_attributes(node, responsive_attributes(response, self._sizes))
        self._strip(node, writer)

    @staticmethod
    def _strip(node: Node, writer: Writer) -> None:
        writer.remove_attribute(node, UPLOAD_ID)
        writer.remove_attribute(node, UPLOAD_STATUS)
