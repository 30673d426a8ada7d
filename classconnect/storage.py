"""Local disk storage for uploaded attachments."""

import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from fastapi import UploadFile

from classconnect.errors import BadRequest


logger = logging.getLogger(__name__)

# Authoritative allow-list. The web client offers Word/PowerPoint for
# materials but the server rejects them.
ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "application/pdf",
    }
)

URL_PREFIX = "/uploads"
CHUNK_SIZE = 64 * 1024

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


@dataclass(frozen=True)
class StoredFile:
    stored_name: str
    url: str
    original_name: str
    size: int
    mime_type: str


def ensure_directory(path: Path) -> None:
    """Create ``path`` if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)


def safe_extension(filename: str) -> str:
    """Lower-cased extension of ``filename``, or ``""`` if it is not plain."""

    suffix = Path(filename or "").suffix.lower()
    return suffix if _EXTENSION_RE.match(suffix) else ""


class FileStorage:
    """Validates uploads and writes them under generated unique names."""

    def __init__(
        self,
        upload_dir: Path,
        max_file_size: int,
        allowed_types: Iterable[str] = ALLOWED_MIME_TYPES,
        max_files: int = 5,
    ) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_file_size = max_file_size
        self.allowed_types = frozenset(allowed_types)
        self.max_files = max_files
        ensure_directory(self.upload_dir)

    @classmethod
    def from_settings(cls, settings) -> "FileStorage":
        return cls(
            settings.upload_dir,
            settings.max_file_size,
            max_files=settings.max_files_per_request,
        )

    def url(self, stored_name: str) -> str:
        return f"{URL_PREFIX}/{stored_name}"

    def path(self, stored_name: str) -> Path:
        return self.upload_dir / Path(stored_name).name

    def _new_name(self, original_name: str) -> str:
        return uuid.uuid4().hex + safe_extension(original_name)

    def _check_type(self, original_name: str, mime_type: Optional[str]) -> None:
        if mime_type not in self.allowed_types:
            raise BadRequest(
                f"Unsupported file format for {original_name!r}. "
                "Only JPEG, PNG, GIF and PDF files are allowed.",
                code="UNSUPPORTED_TYPE",
            )

    def _too_large(self) -> BadRequest:
        limit_mb = self.max_file_size / (1024 * 1024)
        return BadRequest(
            f"File is too large. Maximum size is {limit_mb:g}MB.", code="FILE_TOO_LARGE"
        )

    def store(self, data: bytes, original_name: str, mime_type: Optional[str]) -> StoredFile:
        """Persist ``data`` and return where it went."""

        self._check_type(original_name, mime_type)
        if len(data) > self.max_file_size:
            raise self._too_large()

        stored_name = self._new_name(original_name)
        destination = self.path(stored_name)
        ensure_directory(destination.parent)
        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.error("Could not write upload %s: %s", destination, exc)
            raise BadRequest(f"Error uploading file: {exc}", code="UPLOAD_ERROR") from exc
        return StoredFile(stored_name, self.url(stored_name), original_name, len(data), mime_type)

    async def store_upload(self, upload: UploadFile) -> StoredFile:
        """Stream an ``UploadFile`` to disk, enforcing the size limit as it reads."""

        original_name = upload.filename or "upload"
        self._check_type(original_name, upload.content_type)

        stored_name = self._new_name(original_name)
        destination = self.path(stored_name)
        ensure_directory(destination.parent)
        size = 0
        try:
            with destination.open("wb") as f:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise self._too_large()
                    f.write(chunk)
        except BadRequest:
            self.delete(stored_name)
            raise
        except OSError as exc:
            self.delete(stored_name)
            logger.error("Could not write upload %s: %s", destination, exc)
            raise BadRequest(f"Error uploading file: {exc}", code="UPLOAD_ERROR") from exc
        return StoredFile(stored_name, self.url(stored_name), original_name, size, upload.content_type)

    async def store_uploads(self, uploads: Sequence[UploadFile]) -> List[StoredFile]:
        """Store a batch; if any file fails, the ones already written are removed."""

        uploads = [u for u in uploads if u is not None and (u.filename or "") != ""]
        if len(uploads) > self.max_files:
            raise BadRequest(
                f"Too many files. Maximum is {self.max_files} per request.", code="UPLOAD_ERROR"
            )
        stored: List[StoredFile] = []
        try:
            for upload in uploads:
                stored.append(await self.store_upload(upload))
        except Exception:
            self.delete_many(f.stored_name for f in stored)
            raise
        return stored

    def delete(self, stored_name: str) -> bool:
        """Best-effort removal. Failures are logged, never raised."""

        target = self.path(stored_name)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete uploaded file %s: %s", target, exc)
            return False
        logger.info("Deleted uploaded file %s", target.name)
        return True

    def delete_many(self, stored_names: Iterable[str]) -> None:
        for name in stored_names:
            self.delete(name)

    def cleanup_callback(self, files: Sequence[StoredFile]):
        """Callback for :func:`classconnect.db.transaction` that removes ``files``."""

        def _cleanup() -> None:
            self.delete_many(f.stored_name for f in files)

        return _cleanup
