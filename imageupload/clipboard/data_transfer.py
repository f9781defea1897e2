from dataclasses import dataclass, field

from imageupload.upload.models import FileObject


@dataclass
class DataTransfer:
    """Content of a paste or drop: attached files plus typed string data."""

    files: list[FileObject | None] = field(default_factory=list)
    data: dict[str, str] = field(default_factory=dict)

    @property
    def types(self) -> list[str]:
        types = list(self.data)
        if self.files:
            types.insert(0, "Files")
        return types

    def get_data(self, content_type: str) -> str:
        return self.data.get(content_type) or ""
