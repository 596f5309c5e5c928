"""
Media store - per-owner file storage for listing photos.

Files live at {root}/{scope}/{generated name}. The scope is derived from the
uploader's identity, so names only need to be unique within one owner's directory.
Assets are written once and never deleted.
"""

import hashlib
import logging
import os
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from fastapi.concurrency import run_in_threadpool
from prometheus_client import Counter

from marketplace.core.errors import DependencyError, NotFoundError, PayloadTooLargeError, TooManyFilesError, ValidationError

logger = logging.getLogger(__name__)

MEDIA_FILES_STORED = Counter("marketplace_media_files_stored", "Media files written to the store")
MEDIA_BYTES_STORED = Counter("marketplace_media_bytes_stored", "Bytes of media written to the store")

# One path segment; leading alnum rules out "..", hidden and temp files.
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]{0,199}$")
_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content: bytes


def is_safe_segment(value: str) -> bool:
    return bool(_SAFE_SEGMENT.match(value))


def owner_scope(identity_id: str) -> str:
    """Directory name for an identity. Subjects may contain any character (auth0|123, emails)."""
    return hashlib.sha256(identity_id.encode("utf-8")).hexdigest()


def generate_name(original_name: str) -> str:
    """<epoch millis>_<uuid4 hex><original extension>."""
    ext = PurePosixPath(original_name or "").suffix
    if not _SAFE_EXTENSION.match(ext):
        ext = ""
    return f"{time.time_ns() // 1_000_000}_{uuid.uuid4().hex}{ext}"


class MediaStore:
    def __init__(self, root: str | Path, *, max_bytes: int = 5 * 1024 * 1024, max_files: int = 5):
        self.root = Path(root).resolve()
        self.max_bytes = max_bytes
        self.max_files = max_files

    def validate_batch(self, files: list[UploadedFile]) -> None:
        """Reject the whole batch if any limit is violated."""
        if not files:
            raise ValidationError.single("images", "No files uploaded")
        if len(files) > self.max_files:
            raise TooManyFilesError(f"At most {self.max_files} files can be uploaded at once")
        for f in files:
            if len(f.content) > self.max_bytes:
                raise PayloadTooLargeError(f"File {f.filename!r} exceeds {self.max_bytes} bytes")

    @staticmethod
    def _write(directory: Path, name: str, content: bytes) -> None:
        # exist_ok makes concurrent first uploads by the same owner safe
        directory.mkdir(parents=True, exist_ok=True)
        tmp = directory / f".{name}.part"
        tmp.write_bytes(content)
        os.replace(tmp, directory / name)

    async def store(self, scope: str, files: list[UploadedFile], base_url: str) -> list[str]:
        """Persist a batch and return one public URL per file, in order."""
        if not is_safe_segment(scope):
            raise ValidationError.single("scope", "Invalid storage scope")
        self.validate_batch(files)

        directory = self.root / scope
        urls = []
        for f in files:
            name = generate_name(f.filename)
            try:
                await run_in_threadpool(self._write, directory, name, f.content)
            except OSError as e:
                raise DependencyError(f"Could not write {scope}/{name}") from e
            MEDIA_FILES_STORED.inc()
            MEDIA_BYTES_STORED.inc(len(f.content))
            logger.info("Stored %s (%d bytes) as %s/%s", f.filename, len(f.content), scope, name)
            urls.append(f"{base_url.rstrip('/')}/{scope}/{name}")
        return urls

    def path_for(self, scope: str, name: str) -> Path:
        if not (is_safe_segment(scope) and is_safe_segment(name)):
            raise NotFoundError("File not found")
        path = self.root / scope / name
        if not path.is_file():
            raise NotFoundError("File not found")
        return path

    async def retrieve(self, scope: str, name: str) -> bytes:
        path = self.path_for(scope, name)
        return await run_in_threadpool(path.read_bytes)
