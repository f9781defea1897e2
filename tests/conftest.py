from collections.abc import Callable

import pytest

from imageupload.config.settings import Settings
from imageupload.document.document import Document
from imageupload.document.model import Node
from imageupload.editor import Editor, build_editor
from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.loader import FileLoader
from imageupload.upload.reader import FileReader
from mocks import FileReaderMock, UploadAdapterMock


@pytest.fixture()
def adapters() -> list[UploadAdapterMock]:
    return []


@pytest.fixture()
def readers() -> list[FileReaderMock]:
    return []


@pytest.fixture()
def make_editor(
    adapters: list[UploadAdapterMock],
    readers: list[FileReaderMock],
) -> Callable[..., Editor]:
    """Build an editor over ``<paragraph>foo</paragraph>`` with mocked I/O.

    Must be called from a running event loop.
    """

    def _adapter_factory(loader: FileLoader) -> BaseUploadAdapter:
        adapter = UploadAdapterMock(loader)
        adapters.append(adapter)
        return adapter

    def _reader_factory() -> FileReader:
        reader = FileReaderMock()
        readers.append(reader)
        return reader

    def _make(document: Document | None = None, **kwargs: object) -> Editor:
        if document is None:
            document = Document([Node("paragraph", text="foo")])
        return build_editor(
            Settings(),
            document=document,
            adapter_factory=_adapter_factory,
            reader_factory=_reader_factory,
            **kwargs,  # type: ignore[arg-type]
        )

    return _make
