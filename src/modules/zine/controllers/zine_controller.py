from functools import lru_cache

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from modules.zine.repositories.zine_repository import ZineRepository
from modules.zine.schemas.zine_schemas import ZineRequestResponse, ZineSubmission, ZineSubmissionResponse
from modules.zine.services.email_sender import EmailJsSender
from modules.zine.services.zine_service import ZineService

router = APIRouter(prefix="/zine", tags=["zine"])


@lru_cache
def get_email_sender() -> EmailJsSender:
    return EmailJsSender.from_config()


def get_zine_service(db: Session = Depends(get_db), sender: EmailJsSender = Depends(get_email_sender)) -> ZineService:
    return ZineService(ZineRepository(db), sender)


@router.post(
    "/submissions",
    response_model=ZineSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Solicitar el zine por correo"
)
def submit_zine_request(payload: ZineSubmission, service: ZineService = Depends(get_zine_service)):
    return ZineSubmissionResponse(data=ZineRequestResponse.model_validate(service.submit(payload)))
