from dataclasses import dataclass, field

from imageupload.clipboard.data_transfer import DataTransfer
from imageupload.document.conversion import html_to_nodes, text_to_nodes
from imageupload.document.document import Document
from imageupload.document.model import Node, Position
from imageupload.events.emitter import Emitter, EventInfo, Priority
from imageupload.logging.logger import Log


@dataclass
class ClipboardInputData:
    data_transfer: DataTransfer
    target: Position


@dataclass
class InputTransformationData:
    content: list[Node] = field(default_factory=list)
    target: Position = field(default_factory=lambda: Position(0))


class ClipboardPipeline(Emitter):
    """Paste/drop pipeline: ``input`` -> ``input_transformation`` -> insertion.

    The default steps run at low priority so features can intercept either
    event first and stop it.
    """

    def __init__(self, document: Document) -> None:
        super().__init__()
        self._document = document
        self.on("input", self._convert_input, priority=Priority.LOW)
        self.on("input_transformation", self._insert_content, priority=Priority.LOW)

    def paste(self, data_transfer: DataTransfer, target: Position | None = None) -> None:
        if self._document.read_only:
            Log.debug("Ignoring clipboard input for a read-only document")
            return
        target = target if target is not None else self._document.selection
        self.fire("input", ClipboardInputData(data_transfer=data_transfer, target=target))

    def _convert_input(self, info: EventInfo, data: ClipboardInputData) -> None:
        _ = info
        html = data.data_transfer.get_data("text/html")
        if html:
            content = html_to_nodes(html)
        else:
            content = text_to_nodes(data.data_transfer.get_data("text/plain"))
        self.fire(
            "input_transformation",
            InputTransformationData(content=content, target=data.target),
        )

    def _insert_content(self, info: EventInfo, data: InputTransformationData) -> None:
        _ = info
        if data.content:
            self._document.insert_content(data.content, data.target)
