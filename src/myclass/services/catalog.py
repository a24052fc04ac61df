"""Courses and announcements: listing, lookup and file-coupled mutations."""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from ..attachments import COURSE_FILE, TEACHER_IMAGE, AttachedFileManager
from ..database import Announcement, Course
from ..errors import NotFound, ValidationError
from ..storage import StagedFile

logger = logging.getLogger(__name__)

COURSE_SORT_COLUMNS = {
    "title": Course.title,
    "category": Course.category,
    "level": Course.level,
    "created_at": Course.created_at,
}
ANNOUNCEMENT_SORT_COLUMNS = {
    "title": Announcement.title,
    "teacher_name": Announcement.teacher_name,
    "created_at": Announcement.created_at,
}
COURSE_REQUIRED = ("title", "description")
ANNOUNCEMENT_REQUIRED = ("title", "description")


def apply_sort(query, columns: Dict, default, id_column, sort: Optional[str], order: Optional[str]):
    """Order by an allow-listed column; anything else falls back to newest first."""
    column = columns.get(sort) if sort else None
    if column is None:
        return query.order_by(default.desc(), id_column.desc())
    if order == "asc":
        return query.order_by(column.asc(), id_column.asc())
    return query.order_by(column.desc(), id_column.desc())


def _course_exists(session: Session, announcement) -> None:
    course_id = announcement.course_id
    if course_id is not None and session.get(Course, course_id) is None:
        raise ValidationError(f"Course {course_id} does not exist")


class CatalogService:
    """Resource repository for courses and announcements."""

    def __init__(self, files: AttachedFileManager):
        self.files = files

    # ------------------------------------------------------------ courses

    def list_courses(
        self,
        session: Session,
        category: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Tuple[List[Course], int]:
        query = session.query(Course).options(joinedload(Course.creator))
        if category:
            query = query.filter(Course.category == category)
        query = apply_sort(query, COURSE_SORT_COLUMNS, Course.created_at, Course.id, sort, order)
        courses = query.all()
        return courses, len(courses)

    def get_course(self, session: Session, course_id: int) -> Course:
        course = (
            session.query(Course)
            .options(joinedload(Course.creator))
            .filter(Course.id == course_id)
            .first()
        )
        if course is None:
            raise NotFound("Course not found")
        return course

    def create_course(
        self, session: Session, fields: Dict, created_by: int, staged: Optional[StagedFile] = None
    ) -> Course:
        values = {k: v for k, v in fields.items() if v is not None}
        values["created_by"] = created_by
        return self.files.create(
            session, Course, values, COURSE_FILE, staged=staged, required=COURSE_REQUIRED
        )

    def update_course(
        self, session: Session, course_id: int, changes: Dict, staged: Optional[StagedFile] = None
    ) -> Course:
        changes = {k: v for k, v in changes.items() if v is not None}
        return self.files.update(
            session,
            Course,
            course_id,
            changes,
            COURSE_FILE,
            staged=staged,
            required=COURSE_REQUIRED,
        )

    def delete_course(self, session: Session, course_id: int) -> None:
        self.files.delete(session, Course, course_id, COURSE_FILE)

    # ------------------------------------------------------------ announcements

    def list_announcements(
        self,
        session: Session,
        active: Optional[bool] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Tuple[List[Announcement], int]:
        query = session.query(Announcement).options(
            joinedload(Announcement.creator), joinedload(Announcement.course)
        )
        if active is not None:
            query = query.filter(Announcement.is_active.is_(active))
        query = apply_sort(
            query,
            ANNOUNCEMENT_SORT_COLUMNS,
            Announcement.created_at,
            Announcement.id,
            sort,
            order,
        )
        items = query.all()
        return items, len(items)

    def get_announcement(self, session: Session, announcement_id: int) -> Announcement:
        announcement = (
            session.query(Announcement)
            .options(joinedload(Announcement.creator), joinedload(Announcement.course))
            .filter(Announcement.id == announcement_id)
            .first()
        )
        if announcement is None:
            raise NotFound("Announcement not found")
        return announcement

    def create_announcement(
        self, session: Session, fields: Dict, created_by: int, staged: Optional[StagedFile] = None
    ) -> Announcement:
        values = {k: v for k, v in fields.items() if v is not None}
        values["created_by"] = created_by
        return self.files.create(
            session,
            Announcement,
            values,
            TEACHER_IMAGE,
            staged=staged,
            required=ANNOUNCEMENT_REQUIRED,
            check=_course_exists,
        )

    def update_announcement(
        self,
        session: Session,
        announcement_id: int,
        changes: Dict,
        staged: Optional[StagedFile] = None,
    ) -> Announcement:
        changes = {k: v for k, v in changes.items() if v is not None}
        return self.files.update(
            session,
            Announcement,
            announcement_id,
            changes,
            TEACHER_IMAGE,
            staged=staged,
            required=ANNOUNCEMENT_REQUIRED,
            check=_course_exists,
        )

    def delete_announcement(self, session: Session, announcement_id: int) -> None:
        self.files.delete(session, Announcement, announcement_id, TEACHER_IMAGE)
