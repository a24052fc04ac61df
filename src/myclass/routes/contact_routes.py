from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_contact, get_db
from ..schemas import ContactRequest, ContactResponse
from ..services import ContactService

router = APIRouter(tags=["contact"])


@router.post("/contact", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: ContactRequest,
    db: Session = Depends(get_db),
    contact: ContactService = Depends(get_contact),
):
    message = contact.create(db, payload.model_dump())
    return ContactResponse(message="Message sent successfully", message_id=message.id)
