from dataclasses import dataclass
from typing import Any, Dict

from .errors import ValidationError
from .wire import entity_id


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        if not isinstance(data, dict):
            raise ValidationError("category must be object")
        return cls(
            id=entity_id(data),
            name=str(data.get("name", "") or "").strip(),
            color=str(data.get("color", "") or "").strip(),
        )
