from unittest.mock import MagicMock

import pytest

from imageupload.clipboard.blobs import Blob
from imageupload.clipboard.data_transfer import DataTransfer
from imageupload.config.settings import Settings
from imageupload.document.conversion import stringify
from imageupload.document.document import Document
from imageupload.document.model import UPLOAD_ID, Node, Position
from imageupload.editor import Editor, build_editor
from imageupload.events.emitter import EventInfo, Priority
from imageupload.notification.notification import NotificationData
from imageupload.upload.exceptions import FetchError
from mocks import BASE64_SAMPLE, PNG_BYTES, FileReaderMock, UploadAdapterMock, flush


def _paste_html(editor: Editor, html: str, target: Position = Position(1)) -> None:
    editor.clipboard.paste(DataTransfer(data={"text/html": html}), target)


def _record_warnings(editor: Editor) -> list[NotificationData]:
    warnings: list[NotificationData] = []

    def record(info: EventInfo, data: NotificationData) -> None:
        warnings.append(data)
        info.stop()

    editor.notification.on("show:warning", record, priority=Priority.HIGH)
    return warnings


class TestBase64Images:
    @pytest.mark.asyncio
    async def test_pasted_base64_image_becomes_placeholder(self, make_editor) -> None:
        editor = make_editor()

        _paste_html(editor, f'<img src="{BASE64_SAMPLE}">')

        [loader] = editor.repository.loaders
        assert stringify(editor.document) == (
            '<paragraph>foo</paragraph>'
            f'<image src="" uploadId="{loader.id}" uploadStatus="reading"></image>'
        )

    @pytest.mark.asyncio
    async def test_decoded_file_is_uploaded(
        self,
        make_editor,
        readers: list[FileReaderMock],
        adapters: list[UploadAdapterMock],
    ) -> None:
        editor = make_editor()
        _paste_html(editor, f'<img src="{BASE64_SAMPLE}">')
        [loader] = editor.repository.loaders

        await flush()
        readers[0].mock_success()
        await flush()
        adapters[0].mock_success({"default": "image.png"})
        await editor.upload_editing.wait_until_settled()

        file = loader.file.result()
        assert file.name == "image.png"
        assert file.content_type == "image/png"
        assert file.data == PNG_BYTES
        assert stringify(editor.document) == '<paragraph>foo</paragraph><image src="image.png"></image>'

    @pytest.mark.asyncio
    async def test_remote_images_are_left_alone(self, make_editor) -> None:
        editor = make_editor()

        _paste_html(editor, '<img src="https://example.com/a.png">')

        assert editor.repository.loaders == []
        assert stringify(editor.document.images()) == '<image src="https://example.com/a.png"></image>'

    @pytest.mark.asyncio
    async def test_text_around_images_is_kept(self, make_editor) -> None:
        editor = make_editor(Document([Node("paragraph", text="")]))

        _paste_html(editor, f'<p>before</p><img src="{BASE64_SAMPLE}"><p>after</p>', Position(0, 0))

        assert [node.name for node in editor.document] == ["paragraph", "image", "paragraph"]
        assert editor.document.root[0].text == "before"
        assert editor.document.root[2].text == "after"

    @pytest.mark.asyncio
    async def test_not_transformed_where_images_are_not_allowed(self, make_editor) -> None:
        editor = make_editor()
        editor.document.schema.root_elements.discard("image")

        _paste_html(editor, f'<img src="{BASE64_SAMPLE}">')

        assert editor.repository.loaders == []

    @pytest.mark.asyncio
    async def test_without_adapter_image_keeps_its_source(self) -> None:
        editor = build_editor(
            Settings(upload_adapter="none"),
            document=Document([Node("paragraph", text="foo")]),
        )

        _paste_html(editor, f'<img src="{BASE64_SAMPLE}">')
        await flush()

        [image] = editor.document.images()
        assert image.attributes == {"src": BASE64_SAMPLE}


class TestBlobImages:
    @pytest.mark.asyncio
    async def test_blob_is_fetched_from_registry(
        self,
        make_editor,
        readers: list[FileReaderMock],
    ) -> None:
        editor = make_editor()
        url = editor.blobs.create_url(PNG_BYTES, "image/png")

        _paste_html(editor, f'<img src="{url}">')
        [loader] = editor.repository.loaders
        await flush()

        file = loader.file.result()
        assert file.name == "image.png"
        assert file.data == PNG_BYTES
        assert readers[0].read_calls == 1

    @pytest.mark.asyncio
    async def test_untyped_blob_uses_default_extension(self, make_editor) -> None:
        editor = make_editor()
        url = editor.blobs.create_url(PNG_BYTES)

        _paste_html(editor, f'<img src="{url}">')
        [loader] = editor.repository.loaders
        await flush()

        file = loader.file.result()
        assert file.name == "image.jpeg"
        assert file.content_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_failed_fetch_only_removes_its_own_placeholder(
        self,
        make_editor,
        readers: list[FileReaderMock],
        adapters: list[UploadAdapterMock],
    ) -> None:
        async def fetch(url: str) -> Blob:
            if url.endswith("/3"):
                raise FetchError(f"Cannot fetch {url}")
            return Blob(PNG_BYTES, "image/png")

        editor = make_editor(fetch=fetch)
        warnings = _record_warnings(editor)

        _paste_html(editor, '<img src="blob:test/1"><img src="blob:test/2"><img src="blob:test/3">')
        assert len(editor.document.images()) == 3
        await flush()
        readers[0].mock_success()
        readers[1].mock_success()
        await flush()
        upload_ids = [image.get(UPLOAD_ID) for image in editor.document.images()]
        assert len(upload_ids) == 2
        assert len(set(upload_ids)) == 2
        adapters[0].mock_success({"default": "image-1.png"})
        adapters[1].mock_success({"default": "image-2.png"})
        await editor.upload_editing.wait_until_settled()

        assert stringify(editor.document) == (
            '<paragraph>foo</paragraph><image src="image-1.png"></image><image src="image-2.png"></image>'
        )
        assert warnings == []

    @pytest.mark.asyncio
    async def test_unexpected_fetch_failure_is_a_fetch_error(self, make_editor) -> None:
        async def fetch(url: str) -> Blob:
            raise OSError("connection reset")

        editor = make_editor(fetch=fetch)
        warnings = _record_warnings(editor)

        _paste_html(editor, '<img src="blob:test/1">')
        [loader] = editor.repository.loaders
        await editor.upload_editing.wait_until_settled()

        assert isinstance(loader.file.exception(), FetchError)
        assert editor.document.images() == []
        assert warnings == []


class TestFileConstructor:
    @pytest.mark.asyncio
    async def test_missing_constructor_removes_placeholder(self, make_editor) -> None:
        editor = make_editor(file_constructor=None)
        warnings = _record_warnings(editor)

        _paste_html(editor, f'<img src="{BASE64_SAMPLE}">')
        await editor.upload_editing.wait_until_settled()

        assert editor.document.images() == []
        assert warnings == []

    @pytest.mark.asyncio
    async def test_failing_constructor_removes_placeholder(self, make_editor) -> None:
        constructor = MagicMock(side_effect=TypeError("Illegal constructor"))
        editor = make_editor(file_constructor=constructor)

        _paste_html(editor, f'<img src="{BASE64_SAMPLE}">')
        await editor.upload_editing.wait_until_settled()

        constructor.assert_called_once_with(name="image.png", content_type="image/png", data=PNG_BYTES)
        assert editor.document.images() == []

    @pytest.mark.asyncio
    async def test_placeholder_has_upload_id_before_insertion(self, make_editor) -> None:
        editor = make_editor()
        seen: list[str] = []

        def inspect_content(info: EventInfo, data) -> None:
            seen.extend(node.get(UPLOAD_ID) for node in data.content if node.is_image)

        editor.clipboard.on("input_transformation", inspect_content, priority=Priority.LOW + 1)
        _paste_html(editor, f'<img src="{BASE64_SAMPLE}">')

        assert seen == [editor.repository.loaders[0].id]
