from collections.abc import Callable
from dataclasses import dataclass

from imageupload.clipboard.blobs import BlobRegistry
from imageupload.clipboard.pipeline import ClipboardPipeline
from imageupload.config.settings import Settings
from imageupload.document.document import Document
from imageupload.image_upload.command import ImageUploadCommand
from imageupload.image_upload.editing import ImageUploadEditing
from imageupload.image_upload.ingestion import Fetch, FileConstructor, PasteIngestion
from imageupload.notification.notification import Notification
from imageupload.upload.factory import UploadAdapterFactory
from imageupload.upload.file_repository import FileRepository
from imageupload.upload.loader import AdapterFactory
from imageupload.upload.models import FileObject
from imageupload.upload.reader import FileReader


@dataclass
class Editor:
    """Everything wired around one document."""

    settings: Settings
    document: Document
    clipboard: ClipboardPipeline
    notification: Notification
    repository: FileRepository
    command: ImageUploadCommand
    upload_editing: ImageUploadEditing
    ingestion: PasteIngestion
    blobs: BlobRegistry


def build_editor(
    settings: Settings,
    *,
    document: Document | None = None,
    adapter_factory: AdapterFactory | None = None,
    reader_factory: Callable[[], FileReader] = FileReader,
    fetch: Fetch | None = None,
    file_constructor: FileConstructor | None = FileObject,
) -> Editor:
    """Build an Editor with all collaborators.

    ``adapter_factory`` defaults to the one configured in settings.
    """
    document = document if document is not None else Document()
    if adapter_factory is None:
        adapter_factory = UploadAdapterFactory.create(settings)
    blobs = BlobRegistry()
    clipboard = ClipboardPipeline(document)
    notification = Notification()
    repository = FileRepository(adapter_factory, reader_factory=reader_factory)
    command = ImageUploadCommand(document, repository)
    upload_editing = ImageUploadEditing(document, repository, notification, settings)
    ingestion = PasteIngestion(
        document,
        clipboard,
        repository,
        command,
        settings,
        fetch=fetch if fetch is not None else blobs.fetch,
        file_constructor=file_constructor,
    )
    return Editor(
        settings=settings,
        document=document,
        clipboard=clipboard,
        notification=notification,
        repository=repository,
        command=command,
        upload_editing=upload_editing,
        ingestion=ingestion,
        blobs=blobs,
    )
