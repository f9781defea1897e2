from dataclasses import dataclass, field
from typing import Any

UPLOAD_ID = "uploadId"
UPLOAD_STATUS = "uploadStatus"


@dataclass(eq=False)
class Node:
    """A root-level block of the document: a paragraph, an image, or any
    element registered in the schema. Compared by identity."""

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    text: str = ""

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    @property
    def is_image(self) -> bool:
        return self.name == "image"


@dataclass(frozen=True)
class Position:
    """Root-level gap before child ``index`` when ``offset`` is None,
    otherwise a character offset inside the block at ``index``."""

    index: int
    offset: int | None = None

    @property
    def is_root_level(self) -> bool:
        return self.offset is None


@dataclass
class Change:
    """One applied mutation.

    ``index`` is the root index the node was inserted at / removed from;
    ``target`` is the destination index of a move.
    """

    type: str
    node: Node
    index: int = 0
    target: int = 0
    key: str = ""
    old_value: Any = None
    new_value: Any = None


@dataclass
class Batch:
    undoable: bool = True
    is_undo: bool = False
    changes: list[Change] = field(default_factory=list)


@dataclass
class Schema:
    """Which elements may appear at the root, and which are limit elements
    (content cannot be split out of them)."""

    root_elements: set[str] = field(default_factory=lambda: {"paragraph", "image"})
    limit_elements: set[str] = field(default_factory=set)

    def register(self, name: str, *, allow_in_root: bool = True, is_limit: bool = False) -> None:
        if allow_in_root:
            self.root_elements.add(name)
        if is_limit:
            self.limit_elements.add(name)

    def allows_in_root(self, name: str) -> bool:
        return name in self.root_elements

    def is_limit(self, name: str) -> bool:
        return name in self.limit_elements
