from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user, get_db, get_preferences
from ..schemas import UserSettingsRequest, UserSettingsResponse
from ..security import Identity
from ..services import PreferenceService

router = APIRouter(prefix="/user-settings", tags=["settings"])


@router.get("", response_model=UserSettingsResponse)
def get_settings(
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    preferences: PreferenceService = Depends(get_preferences),
):
    return UserSettingsResponse(settings=preferences.get(db, current_user.id))


@router.put("", response_model=UserSettingsResponse)
def update_settings(
    payload: UserSettingsRequest,
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    preferences: PreferenceService = Depends(get_preferences),
):
    saved = preferences.replace(db, current_user.id, payload.settings)
    return UserSettingsResponse(message="Settings saved", settings=saved)
