from dataclasses import dataclass
from typing import Any, Dict

from .errors import ValidationError
from .wire import entity_id


@dataclass(frozen=True)
class Attachment:
    """File stored on the server as part of a task."""

    id: str
    original_name: str
    filename: str = ""
    size: int = 0

    @property
    def size_kb(self) -> float:
        return round(self.size / 1024, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "original_name": self.original_name,
            "filename": self.filename,
            "size": int(self.size or 0),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Attachment":
        if not isinstance(data, dict):
            raise ValidationError("attachment must be object")
        filename = str(data.get("filename", "") or "").strip()
        try:
            size = int(data.get("size", 0) or 0)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid attachment size: {data.get('size')!r}") from exc
        return cls(
            id=entity_id(data),
            original_name=str(data.get("originalName", "") or "").strip() or filename,
            filename=filename,
            size=size,
        )
