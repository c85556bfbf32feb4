# app/api/v1/templates.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import get_settings
from app.schemas.reminders import TemplateResponse, TemplateUpdate
from app.services.reminders.template_service import TemplateService

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/active", response_model=TemplateResponse)
def get_active_template(db: Session = Depends(get_db)):
    """The template used by the next dispatch run. The token is never returned."""
    template = TemplateService.get_active(db, get_settings(), with_token=False)
    record = TemplateService.get_active_record(db)
    return TemplateResponse(
        body=template.body,
        provider=template.provider,
        number_id=template.number_id,
        account_sid=template.account_sid,
        has_token=record is not None and record.token_encrypted is not None,
    )


@router.put("/active", response_model=TemplateResponse)
def update_active_template(data: TemplateUpdate, db: Session = Depends(get_db)):
    record = TemplateService.update_active(db, data)
    return TemplateResponse(
        body=record.body,
        provider=record.provider,
        number_id=record.number_id,
        account_sid=record.account_sid,
        has_token=record.token_encrypted is not None,
    )
