"""Upload staging and removal on the local filesystem.

A staged file is written straight into the public upload directory under a
generated name before its owning row is committed. If the row is committed
the file is already in place; if not, the caller discards it.
"""

import logging
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Optional

from prometheus_client import Counter

from .errors import FileTooLarge, UnsupportedFileType

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"
CHUNK_SIZE = 1024 * 1024

FILES_STAGED = Counter("uploaded_files_staged_total", "Uploaded files staged", ["field"])
FILES_DISCARDED = Counter(
    "uploaded_files_discarded_total", "Staged files deleted after a failed write"
)
FILES_REMOVED = Counter(
    "uploaded_files_removed_total", "Superseded or orphaned files deleted"
)
CLEANUP_FAILURES = Counter(
    "uploaded_files_cleanup_failures_total", "File deletions that failed"
)


def _is_image(mime: str) -> bool:
    return mime.startswith("image/")


def _is_course_material(mime: str) -> bool:
    return mime == "application/pdf" or mime.startswith("video/")


# Upload field name -> MIME predicate.
FIELD_RULES: Dict[str, Callable[[str], bool]] = {
    "course_file": _is_course_material,
    "teacher_image": _is_image,
    "profile_photo": _is_image,
}


def file_kind(mime: str) -> str:
    if mime == "application/pdf":
        return "pdf"
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("image/"):
        return "image"
    return "other"


@dataclass(frozen=True)
class StagedFile:
    """An uploaded file already written to storage, not yet owned by a row."""

    field: str
    url: str
    path: Path
    content_type: str
    size: int

    @property
    def kind(self) -> str:
        return file_kind(self.content_type)


class FileStorage:
    """Stage uploads into ``root`` and delete files by their public URL."""

    def __init__(self, root: str, max_bytes: int = 100 * 1024 * 1024):
        self.root = Path(root)
        self.max_bytes = max_bytes

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def generate_name(self, field: str, original_name: Optional[str]) -> str:
        ext = Path(original_name or "").suffix.lower()
        # Only keep plain extensions such as ".pdf" or ".mp4".
        if not ext[1:].isalnum() or len(ext) > 10:
            ext = ""
        stamp = int(time.time() * 1000)
        return f"{field}-{stamp}-{secrets.randbelow(10**9)}{ext}"

    def path_for(self, url: str) -> Optional[Path]:
        """Map a public URL back to its file, refusing anything outside root."""
        if not url or not url.startswith(PUBLIC_PREFIX + "/"):
            return None
        name = url[len(PUBLIC_PREFIX) + 1:]
        if not name or name != os.path.basename(name) or name in (".", ".."):
            return None
        return self.root / name

    def stage(
        self,
        field: str,
        stream: BinaryIO,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> StagedFile:
        """Validate and write an upload; raises before anything is left behind."""
        mime = (content_type or "").lower()
        allowed = FIELD_RULES.get(field)
        if allowed is not None and not allowed(mime):
            raise UnsupportedFileType(f"Unsupported file type {mime or 'unknown'} for {field}")

        self.ensure_root()
        name = self.generate_name(field, filename)
        path = self.root / name
        size = 0
        out = open(path, "xb")
        try:
            with out:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise FileTooLarge(f"File exceeds the {self.max_bytes} byte limit")
                    out.write(chunk)
        except BaseException:
            self._unlink_quietly(path)
            raise

        FILES_STAGED.labels(field=field).inc()
        logger.info("staged %s upload as %s (%d bytes)", field, name, size)
        return StagedFile(
            field=field,
            url=f"{PUBLIC_PREFIX}/{name}",
            path=path,
            content_type=mime,
            size=size,
        )

    def discard(self, staged: Optional[StagedFile]) -> None:
        """Delete a staged file after a failed write. Never raises."""
        if staged is None:
            return
        if self._unlink_quietly(staged.path):
            FILES_DISCARDED.inc()
            logger.info("discarded staged file %s", staged.url)

    def remove(self, url: Optional[str]) -> bool:
        """Best-effort delete of a committed file by URL. Never raises."""
        if not url:
            return False
        path = self.path_for(url)
        if path is None:
            logger.warning("refusing to delete file outside upload dir: %s", url)
            return False
        if self._unlink_quietly(path):
            FILES_REMOVED.inc()
            logger.info("removed file %s", url)
            return True
        return False

    def exists(self, url: Optional[str]) -> bool:
        path = self.path_for(url) if url else None
        return path is not None and path.is_file()

    def _unlink_quietly(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            logger.debug("file already gone: %s", path)
            return False
        except OSError:
            CLEANUP_FAILURES.inc()
            logger.warning("could not delete %s", path, exc_info=True)
            return False
