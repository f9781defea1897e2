from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar
from uuid import uuid4

from imageupload.logging.logger import Log
from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.exceptions import (
    LoaderAborted,
    LoaderStateError,
    ReadError,
    UploadError,
)
from imageupload.upload.models import FileObject, LoaderStatus, UploadResponse
from imageupload.upload.reader import FileReader

T = TypeVar("T")

AdapterFactory = Callable[["FileLoader"], BaseUploadAdapter]


class FileLoader:
    """Per-file state machine: read a local preview, then upload it.

    ``read`` and ``upload`` switch the status synchronously and return a task.
    ``abort`` cancels whatever is in flight; awaiters then get
    ``LoaderAborted`` and late results are discarded.
    """

    def __init__(
        self,
        file: FileObject | Awaitable[FileObject],
        adapter_factory: AdapterFactory,
        *,
        reader: FileReader | None = None,
        release: Callable[[FileLoader], None] | None = None,
    ) -> None:
        self.id = uuid4().hex
        self.file: asyncio.Future[FileObject] = _as_future(file)
        self.status = LoaderStatus.IDLE
        self.data: str | None = None
        self.upload_response: UploadResponse | None = None
        self.uploaded = 0
        self.upload_total: int | None = None
        self._reader = reader if reader is not None else FileReader()
        self._release = release
        self._pending: asyncio.Future[Any] | None = None
        self._adapter = adapter_factory(self)

    @property
    def adapter(self) -> BaseUploadAdapter:
        return self._adapter

    @property
    def upload_progress(self) -> float | None:
        if not self.upload_total:
            return None
        return self.uploaded / self.upload_total * 100

    def update_progress(self, uploaded: int, total: int | None) -> None:
        self.uploaded = uploaded
        self.upload_total = total

    def read(self) -> asyncio.Task[str]:
        """Start reading the file into ``data``.

        The status stays ``reading`` after the preview is available.

        Raises:
            LoaderStateError: if the loader is not idle.
        """
        if self.status is not LoaderStatus.IDLE:
            raise LoaderStateError(f"Cannot read a file in '{self.status.value}' status")
        self.status = LoaderStatus.READING
        Log.debug("Loader reading", upload_id=self.id)
        return asyncio.ensure_future(self._read())

    def upload(self) -> asyncio.Task[UploadResponse]:
        """Start uploading the resolved file through the adapter.

        Raises:
            LoaderStateError: if the file is not resolved or the loader is
                neither idle nor reading.
        """
        if self.status not in (LoaderStatus.IDLE, LoaderStatus.READING) or not self._file_resolved():
            raise LoaderStateError(f"Cannot upload a file in '{self.status.value}' status")
        self.status = LoaderStatus.UPLOADING
        Log.debug("Loader uploading", upload_id=self.id)
        return asyncio.ensure_future(self._upload())

    def abort(self) -> None:
        """Cancel any in-flight read or upload. Safe to call repeatedly."""
        if self.status is LoaderStatus.ABORTED:
            return
        previous = self.status
        self.status = LoaderStatus.ABORTED
        if previous is LoaderStatus.READING:
            self._reader.abort()
        elif previous is LoaderStatus.UPLOADING:
            self._adapter.abort(self)
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        if not self.file.done():
            self.file.cancel()
        Log.info("Loader aborted", upload_id=self.id, status=previous.value)
        if self._release is not None:
            self._release(self)

    async def _read(self) -> str:
        try:
            file = await self._abortable(self.file)
            data = await self._abortable(self._reader.read(file))
        except ReadError:
            self._fail()
            raise
        self._ensure_not_aborted()
        self.data = data
        return data

    async def _upload(self) -> UploadResponse:
        try:
            response = await self._abortable(self._adapter.upload(self))
            self._ensure_not_aborted()
            self.upload_response = self._validate_response(response)
        except LoaderAborted:
            raise
        except UploadError:
            self._fail()
            raise
        except Exception as exc:
            self._fail()
            raise UploadError(str(exc) or type(exc).__name__) from exc
        self.status = LoaderStatus.IDLE
        Log.debug("Loader upload complete", upload_id=self.id)
        return self.upload_response

    async def _abortable(self, awaitable: Awaitable[T]) -> T:
        if self.status is LoaderStatus.ABORTED:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise LoaderAborted(f"Upload {self.id} was aborted")
        self._pending = asyncio.ensure_future(awaitable)
        try:
            return await self._pending
        except asyncio.CancelledError:
            if self.status is LoaderStatus.ABORTED:
                raise LoaderAborted(f"Upload {self.id} was aborted") from None
            raise
        finally:
            self._pending = None

    def _ensure_not_aborted(self) -> None:
        if self.status is LoaderStatus.ABORTED:
            raise LoaderAborted(f"Upload {self.id} was aborted")

    def _file_resolved(self) -> bool:
        return self.file.done() and not self.file.cancelled() and self.file.exception() is None

    def _fail(self) -> None:
        if self.status is not LoaderStatus.ABORTED:
            self.status = LoaderStatus.ERROR

    @staticmethod
    def _validate_response(response: object) -> UploadResponse:
        if not isinstance(response, Mapping) or not response.get("default"):
            raise UploadError("Upload response has no default location")
        return dict(response)


def _as_future(file: FileObject | Awaitable[FileObject]) -> asyncio.Future[FileObject]:
    if inspect.isawaitable(file):
        return asyncio.ensure_future(file)
    future: asyncio.Future[FileObject] = asyncio.get_running_loop().create_future()
    future.set_result(file)
    return future
