"""Row writes coupled to the file the row owns.

The database commit is the ordering anchor for every operation here:

* a newly staged file is deleted whenever the write fails, before the error
  propagates, so failed writes never leak new files;
* a superseded or removed file is deleted strictly after a successful commit,
  so a crash before the commit leaves the old file in place. A crash between
  the commit and the cleanup leaves at most one orphaned file, never a row
  pointing at a missing one. Cleanup failures are logged and swallowed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFound, PersistenceError, ValidationError
from .storage import FileStorage, StagedFile

logger = logging.getLogger(__name__)

RowCheck = Callable[[Session, Any], None]


@dataclass(frozen=True)
class AttachmentSlot:
    """The column(s) through which a row references its single file."""

    url_column: str
    type_column: Optional[str] = None

    def current(self, row) -> Optional[str]:
        return getattr(row, self.url_column)

    def assign(self, row, staged: StagedFile) -> None:
        setattr(row, self.url_column, staged.url)
        if self.type_column:
            setattr(row, self.type_column, staged.kind)

    def clear(self, row) -> None:
        setattr(row, self.url_column, None)
        if self.type_column:
            setattr(row, self.type_column, None)


COURSE_FILE = AttachmentSlot("file_url", "file_type")
TEACHER_IMAGE = AttachmentSlot("teacher_image_url")
PROFILE_PHOTO = AttachmentSlot("profile_photo_url")


def _label(model) -> str:
    return getattr(model, "__name__", "Record")


class AttachedFileManager:
    """Create, update and delete rows that own at most one stored file."""

    def __init__(self, storage: FileStorage):
        self.storage = storage

    def create(
        self,
        session: Session,
        model: Type,
        values: Dict[str, Any],
        slot: AttachmentSlot,
        staged: Optional[StagedFile] = None,
        required: Iterable[str] = (),
        check: Optional[RowCheck] = None,
    ):
        """Insert a row pointing at ``staged`` (if any) and commit."""
        try:
            row = model(**values)
            self._require(row, required)
            if check is not None:
                check(session, row)
            if staged is not None:
                slot.assign(row, staged)
            session.add(row)
            session.commit()
        except Exception as exc:
            self._abort(session, staged, exc, "create", model)

        logger.info("created %s %s", _label(model), row.id)
        return row

    def update(
        self,
        session: Session,
        model: Type,
        row_id: int,
        changes: Dict[str, Any],
        slot: AttachmentSlot,
        staged: Optional[StagedFile] = None,
        required: Iterable[str] = (),
        check: Optional[RowCheck] = None,
    ):
        """Merge ``changes`` into a row, switching to ``staged`` if given.

        Only keys present in ``changes`` are written; everything else keeps
        its prior value. The previous file is removed once the commit has
        succeeded.
        """
        superseded = None
        try:
            row = session.get(model, row_id)
            if row is None:
                raise NotFound(f"{_label(model)} not found")
            for column, value in changes.items():
                setattr(row, column, value)
            if staged is not None:
                superseded = slot.current(row)
                slot.assign(row, staged)
            self._require(row, required)
            if check is not None:
                check(session, row)
            session.commit()
        except Exception as exc:
            self._abort(session, staged, exc, "update", model)

        logger.info("updated %s %s", _label(model), row_id)
        if superseded and superseded != slot.current(row):
            self._cleanup(superseded)
        return row

    def delete(
        self,
        session: Session,
        model: Type,
        row_id: int,
        slot: AttachmentSlot,
        check: Optional[RowCheck] = None,
    ) -> None:
        """Delete a row, then the file it owned."""
        try:
            row = session.get(model, row_id)
            if row is None:
                raise NotFound(f"{_label(model)} not found")
            if check is not None:
                check(session, row)
            owned = slot.current(row)
            session.delete(row)
            session.commit()
        except Exception as exc:
            self._abort(session, None, exc, "delete", model)

        logger.info("deleted %s %s", _label(model), row_id)
        if owned:
            self._cleanup(owned)

    def detach(self, session: Session, model: Type, row_id: int, slot: AttachmentSlot):
        """Clear a row's file reference, then delete the file."""
        try:
            row = session.get(model, row_id)
            if row is None:
                raise NotFound(f"{_label(model)} not found")
            owned = slot.current(row)
            slot.clear(row)
            session.commit()
        except Exception as exc:
            self._abort(session, None, exc, "detach", model)

        if owned:
            self._cleanup(owned)
        return row

    @staticmethod
    def _require(row, required: Iterable[str]) -> None:
        missing = []
        for name in required:
            value = getattr(row, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    def _abort(self, session: Session, staged, exc: Exception, action: str, model) -> None:
        """Roll back, drop the staged file and re-raise in taxonomy form."""
        try:
            session.rollback()
        except SQLAlchemyError:
            logger.exception("rollback failed during %s %s", action, _label(model))
        finally:
            self.storage.discard(staged)

        if isinstance(exc, SQLAlchemyError):
            logger.exception("failed to %s %s", action, _label(model), exc_info=exc)
            raise PersistenceError(f"Could not {action} {_label(model).lower()}") from exc
        raise exc

    def _cleanup(self, url: str) -> None:
        try:
            self.storage.remove(url)
        except Exception:
            logger.warning("cleanup of %s failed", url, exc_info=True)
