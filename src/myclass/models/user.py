from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String

from ..database import Base, utcnow

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_ADMIN)


class User(Base):
    """SQLAlchemy model for application users."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    birth_date = Column(Date)
    level = Column(String(50), index=True)
    track = Column(String(50))
    school = Column(String(100))
    email = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(20))
    country = Column(String(50), default="Morocco")
    city = Column(String(50))
    profile_photo_url = Column(String(255))
    role = Column(String(20), default=ROLE_STUDENT, nullable=False)
    # Set and cleared together.
    reset_token = Column(String(255), index=True)
    reset_expires = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class UserSettings(Base):
    """Per-user preferences, created with defaults on first read."""

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    notifications_email = Column(Boolean, default=True, nullable=False)
    notifications_course_updates = Column(Boolean, default=True, nullable=False)
    notifications_announcements = Column(Boolean, default=True, nullable=False)
    notifications_marketing = Column(Boolean, default=False, nullable=False)
    appearance_theme = Column(String(20), default="light", nullable=False)
    appearance_font_size = Column(String(20), default="medium", nullable=False)
    appearance_reduced_motion = Column(Boolean, default=False, nullable=False)
    privacy_profile_visibility = Column(String(20), default="public", nullable=False)
    privacy_show_courses = Column(Boolean, default=True, nullable=False)
    privacy_show_activity = Column(Boolean, default=True, nullable=False)
    language = Column(String(10), default="fr", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
