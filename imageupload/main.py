import asyncio
import sys
from pathlib import Path

from imageupload.clipboard.data_transfer import DataTransfer
from imageupload.config.settings import Settings
from imageupload.document.conversion import stringify
from imageupload.document.document import Document
from imageupload.document.model import Node, Position
from imageupload.editor import build_editor
from imageupload.logging.logger import Log
from imageupload.upload.models import FileObject


async def run(settings: Settings, paths: list[Path]) -> str:
    """Drop ``paths`` into an empty document and return the settled markup."""
    editor = build_editor(settings, document=Document([Node("paragraph")]))
    files: list[FileObject | None] = [FileObject.from_path(path) for path in paths]
    editor.clipboard.paste(DataTransfer(files=files), Position(0, 0))
    await editor.upload_editing.wait_until_settled()
    return stringify(editor.document)


def main(argv: list[str] | None = None) -> int:
    """Entry point: settings -> logging -> editor -> drop files -> print document."""
    settings = Settings()
    Log.configure(settings.log_level)
    args = sys.argv[1:] if argv is None else argv
    if not args:
        Log.error("Usage: python -m imageupload.main FILE [FILE ...]")
        return 2
    markup = asyncio.run(run(settings, [Path(arg) for arg in args]))
    print(markup)
    return 0


if __name__ == "__main__":
    sys.exit(main())
