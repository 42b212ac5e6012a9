"""Staging of local files before they are uploaded as task attachments.

Each staged file owns a preview handle (a temporary file by default) that is
released exactly once: when the file is unstaged, when the staged set is
replaced by another :meth:`AttachmentPipeline.stage` call, or when the owning
view closes (:meth:`AttachmentPipeline.clear` / context-manager exit).
"""

from __future__ import annotations

import logging
import mimetypes
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from application.ports import FileField, PreviewAllocator
from core.errors import ValidationError

logger = logging.getLogger("taskdeck.attachments")

ATTACHMENTS_FIELD = "attachments"
MAX_FILE_SIZE = 10 * 1024 * 1024
ACCEPTED_TYPES: Dict[str, Tuple[str, ...]] = {
    "image/jpeg": (".jpeg", ".jpg"),
    "image/png": (".png",),
    "image/gif": (".gif",),
    "application/pdf": (".pdf",),
}
# Any other image/* type is accepted by its declared or guessed content type.
IMAGE_PREFIX = "image/"


def is_accepted_type(content_type: str) -> bool:
    return content_type in ACCEPTED_TYPES or content_type.startswith(IMAGE_PREFIX)


@dataclass(frozen=True)
class LocalFile:
    """A file selected by the user, not yet validated."""

    name: str
    data: bytes
    content_type: str = ""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "LocalFile":
        p = Path(path)
        return cls(name=p.name, data=p.read_bytes(), content_type=guess_content_type(p.name))

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StagedFile:
    name: str
    data: bytes = field(repr=False)
    content_type: str
    preview_handle: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class TransferPayload:
    """Scalar fields plus files, in the gateway's multipart contract."""

    fields: Dict[str, Any]
    files: Tuple[FileField, ...] = ()

    @property
    def multipart(self) -> bool:
        return bool(self.files)


def guess_content_type(name: str) -> str:
    ext = os.path.splitext(name)[1].lower()
    for content_type, extensions in ACCEPTED_TYPES.items():
        if ext in extensions:
            return content_type
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"


def as_file_fields(files: Iterable[Any]) -> Tuple[FileField, ...]:
    """Encode staged/local files under the repeated ``attachments`` field."""
    fields: List[FileField] = []
    for item in files or ():
        content_type = getattr(item, "content_type", "") or guess_content_type(item.name)
        fields.append((ATTACHMENTS_FIELD, (item.name, item.data, content_type)))
    return tuple(fields)


class TempFilePreviewAllocator:
    """Preview handles backed by temporary files; the handle is the file path."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = directory

    def allocate(self, name: str, data: bytes) -> str:
        suffix = os.path.splitext(name)[1]
        fd, path = tempfile.mkstemp(prefix="taskdeck-preview-", suffix=suffix, dir=self.directory)
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        return path

    def release(self, handle: str) -> None:
        Path(handle).unlink(missing_ok=True)


class AttachmentPipeline:
    def __init__(self, allocator: Optional[PreviewAllocator] = None, max_size: int = MAX_FILE_SIZE) -> None:
        self.allocator = allocator or TempFilePreviewAllocator()
        self.max_size = max_size
        self._staged: List[StagedFile] = []
        self.rejections: Tuple[ValidationError, ...] = ()

    @property
    def staged(self) -> Tuple[StagedFile, ...]:
        return tuple(self._staged)

    def __enter__(self) -> "AttachmentPipeline":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.clear()

    @staticmethod
    def accepted_type(file: LocalFile) -> Optional[str]:
        """Accepted content type of ``file`` by declared type or by extension."""
        if file.content_type and is_accepted_type(file.content_type):
            return file.content_type
        guessed = guess_content_type(file.name)
        return guessed if is_accepted_type(guessed) else None

    def validate(self, file: LocalFile) -> Optional[ValidationError]:
        if self.accepted_type(file) is None:
            content_type = file.content_type or guess_content_type(file.name)
            return ValidationError(f"{file.name}: unsupported file type {content_type}")
        if file.size > self.max_size:
            return ValidationError(f"{file.name}: file is larger than {self.max_size // (1024 * 1024)} MB")
        return None

    def stage(self, files: Iterable[Union[LocalFile, str, Path]]) -> Tuple[StagedFile, ...]:
        """Replace the staged set with the accepted subset of ``files``.

        Rejected files are left out of the staged set; the reasons are kept in
        :attr:`rejections` for the caller to display.
        """
        self.clear()
        accepted: List[StagedFile] = []
        rejections: List[ValidationError] = []
        try:
            for item in files:
                local = item if isinstance(item, LocalFile) else LocalFile.from_path(item)
                problem = self.validate(local)
                if problem is not None:
                    logger.warning("Attachment rejected: %s", problem.message)
                    rejections.append(problem)
                    continue
                content_type = self.accepted_type(local) or guess_content_type(local.name)
                handle = self.allocator.allocate(local.name, local.data)
                accepted.append(StagedFile(local.name, local.data, content_type, handle))
        except Exception:
            for staged in accepted:
                self.allocator.release(staged.preview_handle)
            raise
        self._staged = accepted
        self.rejections = tuple(rejections)
        return self.staged

    def unstage(self, file: StagedFile) -> None:
        for idx, staged in enumerate(self._staged):
            if staged.preview_handle == file.preview_handle:
                del self._staged[idx]
                self.allocator.release(staged.preview_handle)
                return

    def clear(self) -> None:
        staged, self._staged = self._staged, []
        for item in staged:
            self.allocator.release(item.preview_handle)

    close = clear

    def to_transfer_payload(self, scalar_fields: Dict[str, Any]) -> TransferPayload:
        return TransferPayload(fields=dict(scalar_fields or {}), files=as_file_fields(self._staged))


__all__ = [
    "ACCEPTED_TYPES",
    "IMAGE_PREFIX",
    "ATTACHMENTS_FIELD",
    "MAX_FILE_SIZE",
    "AttachmentPipeline",
    "LocalFile",
    "StagedFile",
    "TempFilePreviewAllocator",
    "TransferPayload",
    "as_file_fields",
    "guess_content_type",
    "is_accepted_type",
]
