from unittest.mock import patch

import pytest

from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.file_repository import FileRepository
from imageupload.upload.loader import FileLoader
from imageupload.upload.models import LoaderStatus
from mocks import FileReaderMock, UploadAdapterMock, make_png_file


def _make_repository() -> FileRepository:
    def adapter_factory(loader: FileLoader) -> BaseUploadAdapter:
        return UploadAdapterMock(loader)

    return FileRepository(adapter_factory, reader_factory=FileReaderMock)


class TestCreateLoader:
    @pytest.mark.asyncio
    async def test_registers_loader_by_file_and_id(self) -> None:
        repository = _make_repository()
        file = make_png_file()

        loader = repository.create_loader(file)

        assert loader is not None
        assert loader.status is LoaderStatus.IDLE
        assert repository.get_loader(file) is loader
        assert repository.get_loader(loader.id) is loader
        assert repository.loaders == [loader]

    @pytest.mark.asyncio
    async def test_same_file_returns_same_loader(self) -> None:
        repository = _make_repository()
        file = make_png_file()

        assert repository.create_loader(file) is repository.create_loader(file)

    @pytest.mark.asyncio
    async def test_each_loader_gets_its_own_adapter(self) -> None:
        repository = _make_repository()

        first = repository.create_loader(make_png_file())
        second = repository.create_loader(make_png_file())

        assert first is not None and second is not None
        assert first.id != second.id
        assert first.adapter is not second.adapter
        assert isinstance(first.adapter, UploadAdapterMock)
        assert first.adapter.loader is first

    @pytest.mark.asyncio
    async def test_without_adapter_factory_logs_and_returns_none(self) -> None:
        repository = FileRepository()

        with patch("imageupload.upload.file_repository.Log") as mock_log:
            loader = repository.create_loader(make_png_file())

        assert loader is None
        mock_log.error.assert_called_once()
        assert "Upload adapter is not configured" in mock_log.error.call_args[0][0]
        assert repository.loaders == []


class TestDestroyLoader:
    @pytest.mark.asyncio
    async def test_destroy_by_loader(self) -> None:
        repository = _make_repository()
        file = make_png_file()
        loader = repository.create_loader(file)
        assert loader is not None

        repository.destroy_loader(loader)

        assert repository.get_loader(file) is None
        assert repository.get_loader(loader.id) is None

    @pytest.mark.asyncio
    async def test_destroy_by_file_is_idempotent(self) -> None:
        repository = _make_repository()
        file = make_png_file()
        repository.create_loader(file)

        repository.destroy_loader(file)
        repository.destroy_loader(file)

        assert repository.loaders == []

    @pytest.mark.asyncio
    async def test_abort_releases_loader(self) -> None:
        repository = _make_repository()
        loader = repository.create_loader(make_png_file())
        assert loader is not None

        loader.abort()

        assert repository.get_loader(loader.id) is None


class TestIsLive:
    @pytest.mark.asyncio
    async def test_registered_loader_is_live(self) -> None:
        repository = _make_repository()
        loader = repository.create_loader(make_png_file())
        assert loader is not None

        assert repository.is_live(loader) is True

    @pytest.mark.asyncio
    async def test_destroyed_or_failed_loader_is_not_live(self) -> None:
        repository = _make_repository()
        destroyed = repository.create_loader(make_png_file())
        failed = repository.create_loader(make_png_file())
        assert destroyed is not None and failed is not None

        repository.destroy_loader(destroyed)
        failed.status = LoaderStatus.ERROR

        assert repository.is_live(destroyed) is False
        assert repository.is_live(failed) is False


class TestAggregateProgress:
    @pytest.mark.asyncio
    async def test_sums_over_loaders(self) -> None:
        repository = _make_repository()
        first = repository.create_loader(make_png_file())
        second = repository.create_loader(make_png_file())
        assert first is not None and second is not None

        first.update_progress(10, 100)
        second.update_progress(40, 100)

        assert repository.uploaded == 50
        assert repository.upload_total == 200
        assert repository.upload_progress == 25.0

    @pytest.mark.asyncio
    async def test_unknown_total_gives_no_progress(self) -> None:
        repository = _make_repository()
        repository.create_loader(make_png_file())

        assert repository.upload_total is None
        assert repository.upload_progress is None
