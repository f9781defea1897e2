from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from imageupload.upload.models import UploadResponse

if TYPE_CHECKING:
    from imageupload.upload.loader import FileLoader


class BaseUploadAdapter(ABC):
    """Contract for all upload transport adapters. One instance per loader."""

    @abstractmethod
    async def upload(self, loader: FileLoader) -> UploadResponse:
        """Send the loader's file to the server.

        Args:
            loader: The loader being uploaded. ``loader.file`` is resolved.
                Adapters may report progress through ``loader.update_progress``.

        Returns:
            Mapping with a ``"default"`` location and optional width keys.

        Raises:
            UploadError: on any transport or server failure.
        """

    @abstractmethod
    def abort(self, loader: FileLoader) -> None:
        """Stop an in-flight upload. Must be safe after the upload settled."""
