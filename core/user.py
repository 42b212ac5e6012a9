from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ValidationError
from .wire import entity_id


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    external_identity_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "external_identity_id": self.external_identity_id,
        }
        return {k: v for k, v in payload.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        if not isinstance(data, dict):
            raise ValidationError("user must be object")
        external = str(data.get("googleId", "") or "").strip()
        return cls(
            id=entity_id(data),
            name=str(data.get("name", "") or "").strip(),
            email=str(data.get("email", "") or "").strip(),
            external_identity_id=external or None,
        )
