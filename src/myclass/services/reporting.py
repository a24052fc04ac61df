"""Administrator views: dashboard counters and user management."""

import logging
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..attachments import PROFILE_PHOTO, AttachedFileManager
from ..database import Announcement, ContactMessage, Course, utcnow
from ..errors import InvalidOperation, NotFound, PersistenceError
from ..models.user import ROLES, User
from ..security import Identity
from .catalog import apply_sort

logger = logging.getLogger(__name__)

RECENT_DAYS = 30

USER_SORT_COLUMNS = {
    "last_name": User.last_name,
    "first_name": User.first_name,
    "email": User.email,
    "level": User.level,
    "created_at": User.created_at,
}


class ReportingService:
    def __init__(self, files: AttachedFileManager):
        self.files = files

    def stats(self, session: Session) -> Dict[str, int]:
        since = utcnow() - timedelta(days=RECENT_DAYS)
        return {
            "total_users": session.query(func.count(User.id)).scalar(),
            "total_courses": session.query(func.count(Course.id)).scalar(),
            "total_messages": session.query(func.count(ContactMessage.id)).scalar(),
            "total_announcements": session.query(func.count(Announcement.id)).scalar(),
            "recent_users": session.query(func.count(User.id))
            .filter(User.created_at >= since)
            .scalar(),
        }

    def list_users(
        self,
        session: Session,
        level: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        query = session.query(User)
        if level:
            query = query.filter(User.level == level)
        query = apply_sort(query, USER_SORT_COLUMNS, User.created_at, User.id, sort, order)
        users = query.all()
        return users, len(users)

    def get_user(self, session: Session, user_id: int) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def distinct_levels(self, session: Session) -> List[str]:
        rows = (
            session.query(User.level)
            .filter(User.level.isnot(None), User.level != "")
            .distinct()
            .order_by(User.level)
            .all()
        )
        return [level for (level,) in rows]

    def set_role(self, session: Session, admin: Identity, user_id: int, role: str) -> User:
        """Grant or revoke administrator rights."""
        if role not in ROLES:
            raise InvalidOperation(f"Unknown role {role}")
        if admin.id == user_id:
            raise InvalidOperation("You cannot change your own role")
        user = self.get_user(session, user_id)
        user.role = role
        try:
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to update role of user %s", user_id)
            raise PersistenceError("Could not update role") from exc
        logger.info("admin %s set role of user %s to %s", admin.id, user_id, role)
        return user

    def delete_user(self, session: Session, admin: Identity, user_id: int) -> None:
        """Delete an account and, after commit, its profile photo."""
        if admin.id == user_id:
            raise InvalidOperation("You cannot delete your own account")
        self.files.delete(session, User, user_id, PROFILE_PHOTO)
        logger.info("admin %s deleted user %s", admin.id, user_id)
