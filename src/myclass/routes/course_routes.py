from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ..auth import get_catalog, get_db, get_storage, require_admin
from ..schemas import CourseForm, CourseListResponse, CourseResponse, MessageResponse, SortOrder
from ..security import Identity
from ..services import CatalogService
from ..storage import FileStorage
from .common import stage_upload

router = APIRouter(prefix="/courses", tags=["courses"])


def course_form(
    title: Optional[str] = Form(None, max_length=255),
    description: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, max_length=255),
    category: Optional[str] = Form(None, max_length=100),
    level: Optional[str] = Form(None, max_length=50),
    duration: Optional[str] = Form(None, max_length=50),
) -> CourseForm:
    return CourseForm(
        title=title,
        description=description,
        content=content,
        image_url=image_url,
        category=category,
        level=level,
        duration=duration,
    )


@router.get("", response_model=CourseListResponse)
def list_courses(
    category: Optional[str] = None,
    sort: Optional[str] = None,
    order: SortOrder = "desc",
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
):
    items, total = catalog.list_courses(db, category=category, sort=sort, order=order)
    return CourseListResponse(
        total=total, items=[CourseResponse.model_validate(course) for course in items]
    )


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
):
    return catalog.get_course(db, course_id)


@router.post("", response_model=CourseResponse, status_code=201)
def create_course(
    form: CourseForm = Depends(course_form),
    course_file: Optional[UploadFile] = File(None),
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    catalog: CatalogService = Depends(get_catalog),
):
    staged = stage_upload(storage, "course_file", course_file)
    return catalog.create_course(db, form.model_dump(), admin.id, staged)


@router.put("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: int,
    form: CourseForm = Depends(course_form),
    course_file: Optional[UploadFile] = File(None),
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    catalog: CatalogService = Depends(get_catalog),
):
    staged = stage_upload(storage, "course_file", course_file)
    return catalog.update_course(db, course_id, form.model_dump(), staged)


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: int,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
):
    catalog.delete_course(db, course_id)
    return MessageResponse(message="Course deleted")
