from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from modules.artwork.models.render_request import RenderRequest
from modules.reveal.models.publication import ArtworkPublication, PublicationStatus

CLAIMABLE = (PublicationStatus.PENDING, PublicationStatus.FAILED)


def _with_stale_uploads(condition, stale_before: Optional[datetime]):
    if stale_before is None:
        return condition
    # Una fila UPLOADING sin cambios desde stale_before quedó de una ejecución caída.
    return or_(condition, and_(
        ArtworkPublication.status == PublicationStatus.UPLOADING,
        ArtworkPublication.updated_at < stale_before,
    ))


class PublicationRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    def get(self, token_id: int) -> Optional[ArtworkPublication]:
        return (
            self.db
            .query(ArtworkPublication)
            .filter(ArtworkPublication.token_id == token_id)
            .first()
        )

    def ensure(self, token_id: int, request: RenderRequest) -> ArtworkPublication:
        """Retorna la fila de ``token_id``; si no existe la crea como PENDING"""
        publication = self.get(token_id)
        if publication:
            return publication
        publication = ArtworkPublication(
            token_id=token_id,
            signer_name=request.display_name,
            date_label=request.date_label,
            signature=request.signature_text,
            signer_ordinal=request.signer_ordinal,
            status=PublicationStatus.PENDING,
            attempts=0,
        )
        self.db.add(publication)
        try:
            self.db.commit()
        except IntegrityError:
            # Otra solicitud la insertó primero.
            self.db.rollback()
            return self.get(token_id)
        self.db.refresh(publication)
        return publication

    def claim(self, token_id: int, stale_before: Optional[datetime] = None) -> bool:
        """Pasa atómicamente una fila PENDING o FAILED a UPLOADING.

        Con ``stale_before`` también se puede tomar una fila UPLOADING que no
        cambia desde ese instante. Solo un llamador gana la fila.
        """
        updated = (
            self.db
            .query(ArtworkPublication)
            .filter(
                ArtworkPublication.token_id == token_id,
                _with_stale_uploads(ArtworkPublication.status.in_(CLAIMABLE), stale_before),
            )
            .update(
                {
                    ArtworkPublication.status: PublicationStatus.UPLOADING,
                    ArtworkPublication.attempts: ArtworkPublication.attempts + 1,
                    ArtworkPublication.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated == 1

    def _update(self, token_id: int, **fields) -> Optional[ArtworkPublication]:
        publication = self.get(token_id)
        if not publication:
            return None
        for field, value in fields.items():
            setattr(publication, field, value)
        self.db.commit()
        self.db.refresh(publication)
        return publication

    def mark_published(self, token_id: int, artwork_cid: str, metadata_cid: str,
                       token_uri: str, transaction_hash: str) -> Optional[ArtworkPublication]:
        return self._update(
            token_id,
            status=PublicationStatus.PUBLISHED,
            artwork_cid=artwork_cid,
            metadata_cid=metadata_cid,
            token_uri=token_uri,
            transaction_hash=transaction_hash,
            last_error=None,
        )

    def mark_failed(self, token_id: int, error: str) -> Optional[ArtworkPublication]:
        return self._update(token_id, status=PublicationStatus.FAILED, last_error=error)

    def find_retryable(self, max_attempts: int,
                       stale_before: Optional[datetime] = None) -> List[ArtworkPublication]:
        condition = _with_stale_uploads(ArtworkPublication.status == PublicationStatus.FAILED, stale_before)
        return (
            self.db
            .query(ArtworkPublication)
            .filter(
                condition,
                ArtworkPublication.attempts < max_attempts,
            )
            .order_by(ArtworkPublication.updated_at.asc())
            .all()
        )
