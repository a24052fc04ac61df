"""Database setup and the course/announcement/contact tables."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Engine,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def make_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets cross-thread access and enforced FKs."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, future=True, pool_pre_ping=True)

    engine = create_engine(
        database_url, future=True, connect_args={"check_same_thread": False}
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit is off so committed rows can still be serialized
    # without another round trip.
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


class Course(Base):
    """A catalog course, optionally owning one PDF or video file."""

    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    content = Column(Text)
    image_url = Column(String(255))
    category = Column(String(100), index=True)
    level = Column(String(50))
    duration = Column(String(50))
    file_type = Column(String(10))
    file_url = Column(String(255))
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    creator = relationship("User")


class Announcement(Base):
    """A teacher announcement, optionally owning one teacher image."""

    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    teacher_name = Column(String(255))
    teacher_image_url = Column(String(255))
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"))
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    creator = relationship("User")
    course = relationship("Course")


class ContactMessage(Base):
    """Inbound contact-form message."""

    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False)
    phone = Column(String(20))
    subject = Column(String(100))
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


def init_db(engine: Engine) -> None:
    """Create database tables if they do not exist."""
    # Registers users and user_settings on the shared metadata.
    from .models import user  # noqa: F401

    Base.metadata.create_all(bind=engine)
