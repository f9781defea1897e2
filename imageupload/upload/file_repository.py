from collections.abc import Awaitable, Callable

from imageupload.logging.logger import Log
from imageupload.upload.exceptions import ConfigurationError
from imageupload.upload.loader import AdapterFactory, FileLoader
from imageupload.upload.models import FileObject, LoaderStatus
from imageupload.upload.reader import FileReader

FileHandle = FileObject | Awaitable[FileObject]


class FileRepository:
    """Creates loaders and tracks them by file handle and by id.

    The two mappings are the only state shared between concurrent loaders.
    A loader is registered from ``create_loader`` until it is destroyed or
    aborted.
    """

    def __init__(
        self,
        adapter_factory: AdapterFactory | None = None,
        reader_factory: Callable[[], FileReader] = FileReader,
    ) -> None:
        self.adapter_factory = adapter_factory
        self._reader_factory = reader_factory
        self._loaders_by_file: dict[object, FileLoader] = {}
        self._loaders_by_id: dict[str, FileLoader] = {}
        self._files_by_loader: dict[str, object] = {}

    @property
    def loaders(self) -> list[FileLoader]:
        return list(self._loaders_by_id.values())

    @property
    def uploaded(self) -> int:
        return sum(loader.uploaded for loader in self._loaders_by_id.values())

    @property
    def upload_total(self) -> int | None:
        totals = [loader.upload_total for loader in self._loaders_by_id.values()]
        if not totals or any(total is None for total in totals):
            return None
        return sum(total for total in totals if total is not None)

    @property
    def upload_progress(self) -> float | None:
        total = self.upload_total
        if not total:
            return None
        return self.uploaded / total * 100

    def create_loader(self, file: FileHandle) -> FileLoader | None:
        """Create (or return the existing) loader for a file handle.

        Returns None when no adapter factory is configured; the condition is
        logged, never raised.
        """
        existing = self._loaders_by_file.get(file)
        if existing is not None:
            return existing
        try:
            adapter_factory = self._require_adapter_factory()
        except ConfigurationError as exc:
            Log.error(str(exc))
            return None

        loader = FileLoader(
            file,
            adapter_factory,
            reader=self._reader_factory(),
            release=self.destroy_loader,
        )
        self._loaders_by_file[file] = loader
        self._loaders_by_id[loader.id] = loader
        self._files_by_loader[loader.id] = file
        Log.debug("Loader created", upload_id=loader.id)
        return loader

    def get_loader(self, file_or_id: FileHandle | str) -> FileLoader | None:
        if isinstance(file_or_id, str):
            return self._loaders_by_id.get(file_or_id)
        return self._loaders_by_file.get(file_or_id)

    def destroy_loader(self, file_or_loader: FileHandle | FileLoader) -> None:
        """Forget a loader. Unknown handles are ignored."""
        if isinstance(file_or_loader, FileLoader):
            loader: FileLoader | None = file_or_loader
        else:
            loader = self._loaders_by_file.get(file_or_loader)
        if loader is None or self._loaders_by_id.get(loader.id) is not loader:
            return
        del self._loaders_by_id[loader.id]
        file = self._files_by_loader.pop(loader.id)
        self._loaders_by_file.pop(file, None)
        Log.debug("Loader destroyed", upload_id=loader.id)

    def is_live(self, loader: FileLoader) -> bool:
        """True while ``loader`` still owns its id and has not been torn down."""
        return self._loaders_by_id.get(loader.id) is loader and loader.status not in (
            LoaderStatus.ABORTED,
            LoaderStatus.ERROR,
        )

    def _require_adapter_factory(self) -> AdapterFactory:
        if self.adapter_factory is None:
            raise ConfigurationError(
                "Upload adapter is not configured. Set an adapter factory on the file repository."
            )
        return self.adapter_factory
