import logging

from apscheduler.schedulers.background import BackgroundScheduler

import config
from database import SessionLocal
from modules.artwork.dependencies import get_native_renderer
from modules.reveal.repositories.publication_repository import PublicationRepository
from modules.reveal.services.publication_service import PublicationService

logger = logging.getLogger(__name__)


def retry_failed_publications():
    with SessionLocal() as session:
        service = PublicationService(PublicationRepository(session))
        retried = service.retry_failed(get_native_renderer(), config.MAX_PUBLICATION_ATTEMPTS)
        if retried:
            logger.info("Retried %d publication(s)", len(retried))


def start_publication_retry_job() -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(retry_failed_publications, 'interval', minutes=config.PUBLICATION_RETRY_MINUTES)
    scheduler.start()
    return scheduler
