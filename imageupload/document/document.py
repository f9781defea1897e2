from collections.abc import Callable, Iterable, Iterator
from functools import partial
from typing import Any

from imageupload.document.model import Batch, Change, Node, Position, Schema
from imageupload.events.emitter import Emitter
from imageupload.logging.logger import Log


class Writer:
    """Mutation API handed to ``Document.change`` callbacks.

    Mutations of nodes that are not attached to the document are applied to
    the node but neither reported nor recorded for undo.
    """

    def __init__(self, document: "Document", batch: Batch) -> None:
        self._document = document
        self._batch = batch

    @property
    def batch(self) -> Batch:
        return self._batch

    def insert(self, node: Node, index: int) -> None:
        root = self._document.root
        if self._document.contains(node):
            raise ValueError(f"{node.name} node is already in the document")
        index = max(0, min(index, len(root)))
        root.insert(index, node)
        self._record(Change("insert", node, index=index))

    def remove(self, node: Node) -> None:
        index = self._document.index_of(node)
        if index is None:
            return
        del self._document.root[index]
        self._record(Change("remove", node, index=index))

    def move(self, node: Node, index: int) -> None:
        root = self._document.root
        current = self._document.index_of(node)
        if current is None:
            raise ValueError(f"Cannot move a detached {node.name} node")
        root.pop(current)
        index = max(0, min(index, len(root)))
        root.insert(index, node)
        if index != current:
            self._record(Change("move", node, index=current, target=index))

    def set_attribute(self, node: Node, key: str, value: Any) -> None:
        if value is None:
            self.remove_attribute(node, key)
            return
        old_value = node.attributes.get(key)
        if old_value == value:
            return
        node.attributes[key] = value
        self._record(Change("attribute", node, key=key, old_value=old_value, new_value=value))

    def set_attributes(self, node: Node, attributes: dict[str, Any]) -> None:
        for key, value in attributes.items():
            self.set_attribute(node, key, value)

    def remove_attribute(self, node: Node, key: str) -> None:
        if key not in node.attributes:
            return
        old_value = node.attributes.pop(key)
        self._record(Change("attribute", node, key=key, old_value=old_value, new_value=None))

    def set_text(self, node: Node, text: str) -> None:
        if node.text == text:
            return
        old_value, node.text = node.text, text
        self._record(Change("text", node, old_value=old_value, new_value=text))

    def set_selection(self, position: Position) -> None:
        self._document.selection = position

    def _record(self, change: Change) -> None:
        if change.type in ("insert", "remove") or self._document.contains(change.node):
            self._batch.changes.append(change)


class Document(Emitter):
    """Flat in-memory document: an ordered list of root blocks.

    Every ``change`` block produces one ``Batch``; after the block runs the
    document fires ``change`` with that batch. Changes requested while
    another block or its listeners are running are queued and applied
    afterwards, in order.
    """

    def __init__(self, nodes: Iterable[Node] = (), schema: Schema | None = None) -> None:
        super().__init__()
        self.schema = schema if schema is not None else Schema()
        self.root: list[Node] = list(nodes)
        self.selection = Position(len(self.root))
        self.read_only = False
        self._undo_stack: list[Batch] = []
        self._queue: list[tuple[Callable[[Writer], None], Batch]] = []
        self._processing = False

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self.root))

    def __len__(self) -> int:
        return len(self.root)

    def index_of(self, node: Node) -> int | None:
        for index, child in enumerate(self.root):
            if child is node:
                return index
        return None

    def contains(self, node: Node) -> bool:
        return self.index_of(node) is not None

    def images(self) -> list[Node]:
        return [node for node in self.root if node.is_image]

    def change(self, callback: Callable[[Writer], None], *, undoable: bool = True) -> None:
        self._enqueue(callback, Batch(undoable=undoable))

    def undo(self) -> bool:
        """Revert the most recent undoable batch. Returns False if there is none."""
        if not self._undo_stack:
            return False
        batch = self._undo_stack.pop()
        self._enqueue(partial(self._revert, batch), Batch(undoable=False, is_undo=True))
        return True

    def insert_content(self, nodes: Iterable[Node], position: Position) -> None:
        """General content insertion path used for pasted fragments."""
        accepted = [node for node in nodes if self.schema.allows_in_root(node.name)]
        if accepted:
            self.change(partial(self._insert_content, accepted, position))

    def find_optimal_insertion_position(self, position: Position) -> Position:
        """Where a block (e.g. an image) should go for a caret at ``position``.

        Inside a non-empty block at its end -> after the block; elsewhere in a
        block -> before it. Limit elements keep the position inside them.
        """
        if position.is_root_level or position.index >= len(self.root):
            return Position(min(position.index, len(self.root)))
        block = self.root[position.index]
        if self.schema.is_limit(block.name):
            return position
        if block.text and position.offset is not None and position.offset >= len(block.text):
            return Position(position.index + 1)
        return Position(position.index)

    def _enqueue(self, callback: Callable[[Writer], None], batch: Batch) -> None:
        self._queue.append((callback, batch))
        if self._processing:
            return
        self._processing = True
        error: Exception | None = None
        try:
            while self._queue:
                next_callback, next_batch = self._queue.pop(0)
                try:
                    self._apply(next_callback, next_batch)
                except Exception as exc:
                    # Later batches were queued by earlier listeners and still apply.
                    if error is not None:
                        Log.error(f"Document change failed after an earlier error: {exc}")
                    else:
                        error = exc
        finally:
            self._processing = False
        if error is not None:
            raise error

    def _apply(self, callback: Callable[[Writer], None], batch: Batch) -> None:
        callback(Writer(self, batch))
        if batch.undoable and batch.changes:
            self._undo_stack.append(batch)
        if batch.changes:
            self.fire("change", batch)

    def _revert(self, batch: Batch, writer: Writer) -> None:
        for change in reversed(batch.changes):
            if change.type == "insert":
                writer.remove(change.node)
            elif change.type == "remove":
                if not self.contains(change.node):
                    writer.insert(change.node, change.index)
            elif change.type == "move":
                if self.contains(change.node):
                    writer.move(change.node, change.index)
            elif change.type == "attribute":
                writer.set_attribute(change.node, change.key, change.old_value)
            elif change.type == "text":
                writer.set_text(change.node, change.old_value)

    def _insert_content(self, nodes: list[Node], position: Position, writer: Writer) -> None:
        if position.is_root_level or position.index >= len(self.root):
            index = min(position.index, len(self.root))
            for node in nodes:
                writer.insert(node, index)
                index += 1
            writer.set_selection(Position(index))
            return

        block = self.root[position.index]
        if self.schema.is_limit(block.name):
            return
        offset = position.offset or 0
        left, right = block.text[:offset], block.text[offset:]
        remaining = list(nodes)
        if remaining[0].name == "paragraph":
            left += remaining.pop(0).text
        if not remaining:
            writer.set_text(block, left + right)
            writer.set_selection(Position(position.index, len(left)))
            return
        if remaining[-1].name == "paragraph":
            right = remaining.pop().text + right

        index = position.index
        if left:
            writer.set_text(block, left)
            index += 1
        elif right:
            writer.set_text(block, right)
        else:
            writer.remove(block)
        for node in remaining:
            writer.insert(node, index)
            index += 1
        if left and right:
            writer.insert(Node("paragraph", text=right), index)
        writer.set_selection(Position(index))
