"""Request and response bodies for the HTTP API."""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

MIN_PASSWORD_LENGTH = 6

SortOrder = Literal["asc", "desc"]
Role = Literal["student", "admin"]


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class MessageResponse(BaseModel):
    message: str


# ----------------------------------------------------------------- accounts


class ProfileFields(BaseModel):
    """Editable profile fields shared by registration and profile updates."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    level: Optional[str] = Field(None, max_length=50)
    track: Optional[str] = Field(None, max_length=50)
    school: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=50)


class RegisterRequest(ProfileFields):
    """Request body for creating a student account."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class RegisterResponse(BaseModel):
    message: str
    user_id: int


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role: str


class LoginResponse(BaseModel):
    """Signed session token plus who it belongs to."""

    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: UserSummary


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class ForgotPasswordResponse(BaseModel):
    message: str
    email_sent: bool
    reset_token: Optional[str] = Field(
        None, description="Only returned when EXPOSE_RESET_CODE is enabled"
    )


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class VerifyResetTokenResponse(BaseModel):
    message: str
    email: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class ProfileResponse(BaseModel):
    """Everything a user may see about their own account."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    birth_date: Optional[date] = None
    level: Optional[str] = None
    track: Optional[str] = None
    school: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    profile_photo_url: Optional[str] = None
    created_at: datetime


class ProfileUpdateRequest(ProfileFields):
    pass


class PhotoResponse(BaseModel):
    message: str
    photo_url: Optional[str]
    user: ProfileResponse


# ----------------------------------------------------------------- catalog


class CreatorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str


class CourseSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None


class CourseResponse(BaseModel):
    """Serialized course including its attached file, if any."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    duration: Optional[str] = None
    file_type: Optional[Literal["pdf", "video"]] = None
    file_url: Optional[str] = None
    created_by: Optional[int] = None
    creator: Optional[CreatorSummary] = None
    created_at: datetime
    updated_at: datetime


class CourseListResponse(BaseModel):
    total: int
    items: List[CourseResponse]


class CourseForm(BaseModel):
    """Course fields sent as multipart form data; ``None`` means absent."""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    level: Optional[str] = Field(None, max_length=50)
    duration: Optional[str] = Field(None, max_length=50)


class AnnouncementResponse(BaseModel):
    """Serialized announcement with its author and linked course."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    teacher_name: Optional[str] = None
    teacher_image_url: Optional[str] = None
    course_id: Optional[int] = None
    course: Optional[CourseSummary] = None
    is_active: bool
    created_by: Optional[int] = None
    creator: Optional[CreatorSummary] = None
    created_at: datetime
    updated_at: datetime


class AnnouncementListResponse(BaseModel):
    total: int
    items: List[AnnouncementResponse]


class AnnouncementForm(BaseModel):
    """Announcement fields sent as multipart form data; ``None`` means absent."""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    teacher_name: Optional[str] = Field(None, max_length=255)
    course_id: Optional[int] = None
    is_active: Optional[bool] = None


# ----------------------------------------------------------------- settings


class NotificationSettings(BaseModel):
    email_notifications: bool = True
    course_updates: bool = True
    new_announcements: bool = True
    marketing_emails: bool = False


class AppearanceSettings(BaseModel):
    theme: Literal["light", "dark", "system"] = "light"
    font_size: Literal["small", "medium", "large"] = "medium"
    reduced_motion: bool = False


class PrivacySettings(BaseModel):
    profile_visibility: Literal["public", "private", "students"] = "public"
    show_enrolled_courses: bool = True
    show_activity_status: bool = True


class UserSettingsBody(BaseModel):
    """Complete set of user preferences."""

    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    language: str = Field("fr", min_length=2, max_length=10)


class UserSettingsRequest(BaseModel):
    settings: UserSettingsBody


class UserSettingsResponse(BaseModel):
    message: Optional[str] = None
    settings: UserSettingsBody


# ----------------------------------------------------------------- contact


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    subject: Optional[str] = Field(None, max_length=100)
    message: str = Field(..., min_length=1)


class ContactResponse(BaseModel):
    message: str
    message_id: int


class ContactMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str
    created_at: datetime


class ContactMessageListResponse(BaseModel):
    total: int
    items: List[ContactMessageResponse]


# ----------------------------------------------------------------- admin


class AdminUserListResponse(BaseModel):
    total: int
    items: List[ProfileResponse]


class RoleUpdateRequest(BaseModel):
    role: Role


class LevelsResponse(BaseModel):
    levels: List[str]


class StatsResponse(BaseModel):
    """Dashboard counters."""

    total_users: int
    total_courses: int
    total_messages: int
    total_announcements: int
    recent_users: int = Field(..., description="Users created in the last 30 days")
