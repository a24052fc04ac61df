from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ..auth import get_catalog, get_db, get_storage, require_admin
from ..schemas import (
    AnnouncementForm,
    AnnouncementListResponse,
    AnnouncementResponse,
    MessageResponse,
    SortOrder,
)
from ..security import Identity
from ..services import CatalogService
from ..storage import FileStorage
from .common import stage_upload

router = APIRouter(prefix="/announcements", tags=["announcements"])


def announcement_form(
    title: Optional[str] = Form(None, max_length=255),
    description: Optional[str] = Form(None),
    teacher_name: Optional[str] = Form(None, max_length=255),
    course_id: Optional[int] = Form(None),
    is_active: Optional[bool] = Form(None),
) -> AnnouncementForm:
    return AnnouncementForm(
        title=title,
        description=description,
        teacher_name=teacher_name,
        course_id=course_id,
        is_active=is_active,
    )


@router.get("", response_model=AnnouncementListResponse)
def list_announcements(
    active: Optional[bool] = None,
    sort: Optional[str] = None,
    order: SortOrder = "desc",
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
):
    items, total = catalog.list_announcements(db, active=active, sort=sort, order=order)
    return AnnouncementListResponse(
        total=total, items=[AnnouncementResponse.model_validate(item) for item in items]
    )


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
def get_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
):
    return catalog.get_announcement(db, announcement_id)


@router.post("", response_model=AnnouncementResponse, status_code=201)
def create_announcement(
    form: AnnouncementForm = Depends(announcement_form),
    teacher_image: Optional[UploadFile] = File(None),
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    catalog: CatalogService = Depends(get_catalog),
):
    staged = stage_upload(storage, "teacher_image", teacher_image)
    return catalog.create_announcement(db, form.model_dump(), admin.id, staged)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: int,
    form: AnnouncementForm = Depends(announcement_form),
    teacher_image: Optional[UploadFile] = File(None),
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    catalog: CatalogService = Depends(get_catalog),
):
    staged = stage_upload(storage, "teacher_image", teacher_image)
    return catalog.update_announcement(db, announcement_id, form.model_dump(), staged)


@router.delete("/{announcement_id}", response_model=MessageResponse)
def delete_announcement(
    announcement_id: int,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
):
    catalog.delete_announcement(db, announcement_id)
    return MessageResponse(message="Announcement deleted")
