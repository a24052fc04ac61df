"""Per-user settings stored as flat columns, exposed as nested groups."""

import logging
from typing import Dict

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import NotFound, PersistenceError
from ..models.user import User, UserSettings
from ..schemas import UserSettingsBody

logger = logging.getLogger(__name__)

# (group, field) in the API body -> column on user_settings
COLUMN_MAP = {
    ("notifications", "email_notifications"): "notifications_email",
    ("notifications", "course_updates"): "notifications_course_updates",
    ("notifications", "new_announcements"): "notifications_announcements",
    ("notifications", "marketing_emails"): "notifications_marketing",
    ("appearance", "theme"): "appearance_theme",
    ("appearance", "font_size"): "appearance_font_size",
    ("appearance", "reduced_motion"): "appearance_reduced_motion",
    ("privacy", "profile_visibility"): "privacy_profile_visibility",
    ("privacy", "show_enrolled_courses"): "privacy_show_courses",
    ("privacy", "show_activity_status"): "privacy_show_activity",
}


def to_body(row: UserSettings) -> UserSettingsBody:
    groups: Dict[str, Dict] = {"notifications": {}, "appearance": {}, "privacy": {}}
    for (group, field), column in COLUMN_MAP.items():
        groups[group][field] = getattr(row, column)
    return UserSettingsBody(language=row.language, **groups)


def to_columns(body: UserSettingsBody) -> Dict:
    data = body.model_dump()
    columns = {column: data[group][field] for (group, field), column in COLUMN_MAP.items()}
    columns["language"] = body.language
    return columns


class PreferenceService:
    def get(self, session: Session, user_id: int) -> UserSettingsBody:
        """Return the user's settings, inserting defaults on first read."""
        row = session.query(UserSettings).filter(UserSettings.user_id == user_id).first()
        if row is None:
            row = self._create(session, user_id, to_columns(UserSettingsBody()))
        return to_body(row)

    def replace(self, session: Session, user_id: int, body: UserSettingsBody) -> UserSettingsBody:
        """Overwrite every setting, creating the row if needed."""
        columns = to_columns(body)
        row = session.query(UserSettings).filter(UserSettings.user_id == user_id).first()
        if row is None:
            # A concurrent insert may have won; write our values over it.
            row = self._create(session, user_id, columns)
        for column, value in columns.items():
            setattr(row, column, value)
        try:
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to save settings for user %s", user_id)
            raise PersistenceError("Could not save settings") from exc
        logger.info("saved settings for user %s", user_id)
        return to_body(row)

    def _create(self, session: Session, user_id: int, columns: Dict) -> UserSettings:
        if session.get(User, user_id) is None:
            raise NotFound("User not found")
        row = UserSettings(user_id=user_id, **columns)
        session.add(row)
        try:
            session.commit()
            return row
        except IntegrityError:
            # A concurrent request created the row first.
            session.rollback()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to create settings for user %s", user_id)
            raise PersistenceError("Could not create settings") from exc

        row = session.query(UserSettings).filter(UserSettings.user_id == user_id).first()
        if row is None:
            raise PersistenceError("Could not create settings")
        return row
