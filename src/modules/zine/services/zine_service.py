import logging
from datetime import datetime, timezone
from typing import Dict, List

from modules.zine.models.zine_request import ZineRequest
from modules.zine.repositories.zine_repository import ZineRepository
from modules.zine.schemas.zine_schemas import ZineSubmission
from modules.zine.services.email_sender import EmailError, EmailJsSender

logger = logging.getLogger(__name__)


class ZineTemplate:
    def __init__(self, submission: ZineSubmission, timestamp: datetime = None):
        self.submission = submission
        self.timestamp = timestamp or datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, str]:
        return {
            'name': self.submission.name,
            'email': self.submission.email,
            'address1': self.submission.address1,
            'address2': self.submission.address2,
            'city': self.submission.city,
            'state': self.submission.state,
            'zip': self.submission.zip,
            'timestamp': self.timestamp.isoformat(),
        }


class ZineService:
    def __init__(self, repository: ZineRepository, sender: EmailJsSender):
        self.zine_repository = repository
        self.sender = sender

    def submit(self, submission: ZineSubmission) -> ZineRequest:
        """Guarda la solicitud y avisa por email; un fallo de email no la descarta"""
        zine_request = self.zine_repository.save(ZineRequest(**submission.model_dump()))
        logger.info("Zine submission %d received from %s", zine_request.id, submission.email)

        template = ZineTemplate(submission)
        try:
            self.sender.send(template.to_dict())
        except EmailError as e:
            logger.error("Could not email zine submission %d: %s", zine_request.id, e)
            return zine_request
        return self.zine_repository.update(zine_request.id, {'emailed': True})

    def get_requests(self) -> List[ZineRequest]:
        return self.zine_repository.find_all()
