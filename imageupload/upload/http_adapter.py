from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx

from imageupload.logging.logger import Log
from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.exceptions import UploadError
from imageupload.upload.models import FileObject, UploadResponse

if TYPE_CHECKING:
    from imageupload.upload.loader import FileLoader


class HttpUploadAdapter(BaseUploadAdapter):
    """Posts the file as multipart form data and expects the upload response
    mapping as the JSON body: ``{"default": url, "800": url, ...}``."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: int,
        field_name: str = "upload",
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._field_name = field_name
        self._headers = dict(headers or {})
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def upload(self, loader: FileLoader) -> UploadResponse:
        file = await loader.file
        content = await self._content(file)
        loader.update_progress(0, len(content))
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                self._client = client
                response = await client.post(
                    self._url,
                    files={self._field_name: (file.name, content, file.content_type or None)},
                )
        except httpx.TimeoutException as exc:
            raise UploadError(f"Upload timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise UploadError(f"Upload network error: {exc}") from exc
        finally:
            self._client = None

        if response.is_error:
            raise UploadError(self._error_message(response))
        try:
            body = response.json()
        except ValueError as exc:
            raise UploadError(f"Invalid JSON response: {exc}") from exc
        if not isinstance(body, dict) or not body.get("default"):
            raise UploadError("Upload response has no default location")

        loader.update_progress(len(content), len(content))
        return {key: str(value) for key, value in body.items()}

    def abort(self, loader: FileLoader) -> None:
        # Cancelling the loader's pending task closes the client; nothing to do
        # once the request has settled.
        if self._client is not None:
            Log.debug("Aborting HTTP upload", upload_id=loader.id)

    @staticmethod
    async def _content(file: FileObject) -> bytes:
        if file.data is not None:
            return file.data
        if file.path is None:
            raise UploadError(f"File {file.name} has no content")
        try:
            return await asyncio.to_thread(file.path.read_bytes)
        except OSError as exc:
            raise UploadError(f"Cannot read {file.path}: {exc}") from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error
        return f"Server responded with HTTP {response.status_code}"
