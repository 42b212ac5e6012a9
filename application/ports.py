from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

# (field name, (filename, bytes, content type)) as accepted by requests' ``files=``.
FileField = Tuple[str, Tuple[str, bytes, str]]


class Gateway(Protocol):
    def request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        files: Optional[Sequence[FileField]] = None,
    ) -> Any:
        ...


class CredentialStore(Protocol):
    def load(self) -> Optional[str]:
        ...

    def save(self, token: str) -> None:
        ...

    def clear(self) -> None:
        ...


class PreviewAllocator(Protocol):
    def allocate(self, name: str, data: bytes) -> str:
        ...

    def release(self, handle: str) -> None:
        ...
