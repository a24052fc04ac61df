from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ..auth import get_accounts, get_current_user, get_db, get_storage
from ..schemas import PhotoResponse, ProfileResponse, ProfileUpdateRequest
from ..security import Identity
from ..services import AccountService
from ..storage import FileStorage

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    return accounts.get_user(db, current_user.id)


@router.put("", response_model=ProfileResponse)
@router.put("/update", response_model=ProfileResponse, include_in_schema=False)
def update_profile(
    payload: ProfileUpdateRequest,
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    changes = payload.model_dump(exclude_none=True)
    return accounts.update_profile(db, current_user.id, changes)


@router.post("/photo", response_model=PhotoResponse)
def upload_photo(
    profile_photo: UploadFile = File(...),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    accounts: AccountService = Depends(get_accounts),
):
    staged = storage.stage(
        "profile_photo",
        profile_photo.file,
        profile_photo.filename,
        profile_photo.content_type,
    )
    user = accounts.set_photo(db, current_user.id, staged)
    return PhotoResponse(
        message="Profile photo updated",
        photo_url=user.profile_photo_url,
        user=ProfileResponse.model_validate(user),
    )


@router.delete("/photo", response_model=PhotoResponse)
def delete_photo(
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    user = accounts.delete_photo(db, current_user.id)
    return PhotoResponse(
        message="Profile photo removed",
        photo_url=None,
        user=ProfileResponse.model_validate(user),
    )
