from imageupload.document.document import Document, Writer
from imageupload.document.model import UPLOAD_ID, Node, Position
from imageupload.logging.logger import Log
from imageupload.upload.exceptions import SchemaRejection
from imageupload.upload.file_repository import FileRepository
from imageupload.upload.models import FileObject


class ImageUploadCommand:
    """The "upload image" action and its enablement predicate."""

    def __init__(self, document: Document, repository: FileRepository) -> None:
        self._document = document
        self._repository = repository

    @property
    def is_enabled(self) -> bool:
        position = self._document.find_optimal_insertion_position(self._document.selection)
        return self.can_insert_at(position)

    def can_insert_at(self, position: Position) -> bool:
        """Whether the schema allows an image node at ``position``."""
        if self._document.read_only or not position.is_root_level:
            return False
        return self._document.schema.allows_in_root("image")

    def execute(self, file: FileObject) -> Node | None:
        """Insert a placeholder for ``file`` next to the selection.

        Returns None when the image is not allowed there or no loader could
        be created.
        """
        position = self._document.find_optimal_insertion_position(self._document.selection)
        try:
            return self.insert_placeholder(file, position)
        except SchemaRejection:
            Log.debug("Image not allowed at the selection")
            return None

    def insert_placeholder(self, file: FileObject, position: Position) -> Node | None:
        """Create a loader for ``file`` and insert an image node carrying its id.

        Returns None when no loader could be created or ``file`` already has
        one, so a file never gets two placeholders.

        Raises:
            SchemaRejection: if an image is not allowed at ``position``.
        """
        if not self.can_insert_at(position):
            raise SchemaRejection(f"Image is not allowed at {position}")
        existing = self._repository.get_loader(file)
        if existing is not None:
            Log.debug("File is already being uploaded", upload_id=existing.id)
            return None
        loader = self._repository.create_loader(file)
        if loader is None:
            return None
        node = Node("image", attributes={UPLOAD_ID: loader.id})

        def insert(writer: Writer) -> None:
            writer.insert(node, position.index)
            writer.set_selection(Position(position.index + 1))

        self._document.change(insert)
        return node
