from functools import partial

from imageupload.config.settings import Settings
from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.example_adapter import ExampleUploadAdapter
from imageupload.upload.http_adapter import HttpUploadAdapter
from imageupload.upload.loader import AdapterFactory, FileLoader


class UploadAdapterFactory:
    """Creates the per-loader adapter factory configured in settings."""

    ADAPTERS: tuple[str, ...] = ("http", "example", "none")

    @classmethod
    def create(cls, settings: Settings) -> AdapterFactory | None:
        """Return a callable building one adapter per loader, or None when
        uploads are disabled (``upload_adapter=none``)."""
        name = settings.upload_adapter.lower()
        if name == "none":
            return None
        if name == "example":
            return cls._example
        if name == "http":
            url = settings.upload_url.strip()
            if not url:
                raise ValueError("upload_url is required for upload_adapter=http")
            return partial(
                cls._http,
                url=url,
                timeout_seconds=settings.upload_timeout_seconds,
                field_name=settings.upload_field_name,
                headers=settings.upload_headers,
            )
        raise ValueError(
            f"Unknown upload adapter '{name}'. Choose from: {list(cls.ADAPTERS)}"
        )

    @staticmethod
    def _example(loader: FileLoader) -> BaseUploadAdapter:
        _ = loader
        return ExampleUploadAdapter()

    @staticmethod
    def _http(
        loader: FileLoader,
        *,
        url: str,
        timeout_seconds: int,
        field_name: str,
        headers: dict[str, str],
    ) -> BaseUploadAdapter:
        _ = loader
        return HttpUploadAdapter(
            url=url,
            timeout_seconds=timeout_seconds,
            field_name=field_name,
            headers=headers,
        )
