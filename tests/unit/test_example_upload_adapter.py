"""Tests for ExampleUploadAdapter (template/reference adapter)."""

import pytest

from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.example_adapter import ExampleUploadAdapter
from imageupload.upload.exceptions import UploadError
from imageupload.upload.loader import FileLoader
from mocks import PNG_BYTES, make_png_file


class TestExampleUploadAdapter:
    @pytest.mark.asyncio
    async def test_implements_base_contract(self) -> None:
        adapter = ExampleUploadAdapter()
        loader = FileLoader(make_png_file(), lambda loader: adapter)

        response = await adapter.upload(loader)

        assert isinstance(adapter, BaseUploadAdapter)
        assert response == {"default": f"{ExampleUploadAdapter.BASE_URL}/{loader.id}/image.png"}

    @pytest.mark.asyncio
    async def test_reports_full_progress(self) -> None:
        adapter = ExampleUploadAdapter()
        loader = FileLoader(make_png_file(), lambda loader: adapter)

        await adapter.upload(loader)

        assert loader.uploaded == len(PNG_BYTES)
        assert loader.upload_progress == 100.0

    @pytest.mark.asyncio
    async def test_aborted_adapter_fails(self) -> None:
        adapter = ExampleUploadAdapter()
        loader = FileLoader(make_png_file(), lambda loader: adapter)

        adapter.abort(loader)

        with pytest.raises(UploadError):
            await adapter.upload(loader)
