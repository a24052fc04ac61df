"""Administrator endpoints; every route requires the admin role."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_contact, get_db, get_reporting, require_admin
from ..schemas import (
    AdminUserListResponse,
    ContactMessageListResponse,
    ContactMessageResponse,
    LevelsResponse,
    MessageResponse,
    ProfileResponse,
    RoleUpdateRequest,
    SortOrder,
    StatsResponse,
)
from ..security import Identity
from ..services import ContactService, ReportingService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting),
):
    return StatsResponse(**reporting.stats(db))


@router.get("/users", response_model=AdminUserListResponse)
def list_users(
    level: Optional[str] = None,
    sort: Optional[str] = None,
    order: SortOrder = "desc",
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting),
):
    items, total = reporting.list_users(db, level=level, sort=sort, order=order)
    return AdminUserListResponse(
        total=total, items=[ProfileResponse.model_validate(user) for user in items]
    )


@router.get("/distinct-levels", response_model=LevelsResponse)
def distinct_levels(
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting),
):
    return LevelsResponse(levels=reporting.distinct_levels(db))


@router.get("/users/{user_id}", response_model=ProfileResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting),
):
    return reporting.get_user(db, user_id)


@router.put("/users/{user_id}", response_model=ProfileResponse)
@router.put("/users/{user_id}/role", response_model=ProfileResponse)
def update_role(
    user_id: int,
    payload: RoleUpdateRequest,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting),
):
    return reporting.set_role(db, admin, user_id, payload.role)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting),
):
    reporting.delete_user(db, admin, user_id)
    return MessageResponse(message="User deleted")


@router.get("/messages", response_model=ContactMessageListResponse)
def list_messages(
    email: Optional[str] = None,
    sort: Optional[str] = None,
    order: SortOrder = "desc",
    db: Session = Depends(get_db),
    contact: ContactService = Depends(get_contact),
):
    items, total = contact.list_messages(db, email=email, sort=sort, order=order)
    return ContactMessageListResponse(
        total=total, items=[ContactMessageResponse.model_validate(m) for m in items]
    )


@router.delete("/messages/{message_id}", response_model=MessageResponse)
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    contact: ContactService = Depends(get_contact),
):
    contact.delete(db, message_id)
    return MessageResponse(message="Message deleted")
