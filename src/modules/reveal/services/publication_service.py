import json
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import config
from database import SessionLocal
from modules.artwork.backends.native import NativeRenderer
from modules.artwork.errors import ArtworkError
from modules.artwork.models.render_request import Background, RenderRequest, Viewport
from modules.reveal.models.publication import ArtworkPublication, PublicationStatus
from modules.reveal.repositories.publication_repository import PublicationRepository
from modules.storage.errors import StorageError
from modules.storage.services.ipfs_uploader import PinataUploader
from modules.tokens.errors import ContractError
from modules.tokens.services.contract_gateway import ContractGateway

logger = logging.getLogger(__name__)

ARTWORK_FILENAME = "artwork.png"
METADATA_FILENAME = "metadata.json"


def canonical_request(request: RenderRequest) -> RenderRequest:
    """La obra publicada es siempre el render de escritorio sobre papel"""
    return RenderRequest(
        display_name=request.display_name,
        date_label=request.date_label,
        signature_text=request.signature_text,
        signer_ordinal=request.signer_ordinal,
        background=Background.PAPER,
        viewport=Viewport.DESKTOP,
    )


def build_metadata(token_id: int, request: RenderRequest, artwork_cid: str) -> Dict:
    return {
        "name": f"Digital Maverick Manifesto #{token_id}",
        "description": (
            f"Your unique generative manifesto artwork, signed by "
            f"{request.display_name} on {request.date_label}."
        ),
        "image": f"ipfs://{artwork_cid}/{ARTWORK_FILENAME}",
        "attributes": [
            {"trait_type": "Signer", "value": request.display_name},
            {"trait_type": "Date", "value": request.date_label},
            {"trait_type": "Token ID", "value": str(token_id)},
            {"trait_type": "Transaction Hash", "value": request.signature_text},
        ],
    }


def request_from_publication(publication: ArtworkPublication) -> RenderRequest:
    return RenderRequest(
        display_name=publication.signer_name,
        date_label=publication.date_label,
        signature_text=publication.signature,
        signer_ordinal=publication.signer_ordinal,
    )


class PublicationService:
    """Sube la obra renderizada y su metadata, y apunta el token a ellas.

    Los colaboradores se reciben como proveedores sin argumentos, así una
    configuración faltante hace fallar la publicación y no al llamador. Una
    fila en UPLOADING por más de ``stale_after`` se considera abandonada.
    """

    def __init__(
        self,
        repository: PublicationRepository,
        uploader_provider: Optional[Callable[[], PinataUploader]] = None,
        gateway_provider: Optional[Callable[[], ContractGateway]] = None,
        stale_after: Optional[timedelta] = None,
    ):
        self.repository = repository
        self.uploader_provider = uploader_provider or PinataUploader.from_config
        self.gateway_provider = gateway_provider or ContractGateway.from_config
        self.stale_after = stale_after or timedelta(minutes=config.PUBLICATION_STALE_MINUTES)

    def _stale_before(self) -> datetime:
        return datetime.utcnow() - self.stale_after

    def is_published(self, token_id: int) -> bool:
        publication = self.repository.get(token_id)
        if publication is None:
            return False
        if publication.status == PublicationStatus.UPLOADING:
            return publication.updated_at >= self._stale_before()
        return publication.status == PublicationStatus.PUBLISHED

    def publish(self, token_id: int, request: RenderRequest, png: bytes) -> Optional[ArtworkPublication]:
        """Publica una sola vez por token; retorna None si otra ejecución ya la tomó"""
        self.repository.ensure(token_id, request)
        if not self.repository.claim(token_id, self._stale_before()):
            logger.info("Publication of token %d already claimed, skipping", token_id)
            return None

        try:
            uploader = self.uploader_provider()
            artwork_cid = uploader.upload_directory({ARTWORK_FILENAME: png}, name=f"manifesto-{token_id}-artwork")
            metadata = build_metadata(token_id, request, artwork_cid)
            metadata_cid = uploader.upload_directory(
                {METADATA_FILENAME: json.dumps(metadata).encode("utf-8")},
                name=f"manifesto-{token_id}-metadata",
            )
            token_uri = f"ipfs://{metadata_cid}/{METADATA_FILENAME}"
            transaction_hash = self.gateway_provider().set_token_uri(token_id, token_uri)
        except (StorageError, ContractError) as e:
            logger.error("Publication of token %d failed: %s", token_id, e)
            return self.repository.mark_failed(token_id, str(e))
        except Exception as e:
            logger.exception("Publication of token %d failed unexpectedly", token_id)
            self.repository.mark_failed(token_id, f"{type(e).__name__}: {e}")
            raise

        logger.info("Token %d published at %s", token_id, token_uri)
        return self.repository.mark_published(token_id, artwork_cid, metadata_cid, token_uri, transaction_hash)

    def retry_failed(self, renderer: NativeRenderer, max_attempts: int) -> List[ArtworkPublication]:
        retried = []
        for publication in self.repository.find_retryable(max_attempts, self._stale_before()):
            token_id = publication.token_id
            try:
                request = request_from_publication(publication)
                png = renderer.render(request)
            except ArtworkError as e:
                logger.error("Could not re-render token %d: %s", token_id, e)
                continue
            result = self.publish(token_id, request, png)
            if result is not None:
                retried.append(result)
        return retried


def publish_in_background(token_id: int, request: RenderRequest, renderer: NativeRenderer,
                          png: Optional[bytes] = None) -> None:
    """Publica fuera de una solicitud, con su propia sesión de base de datos"""
    canonical = canonical_request(request)
    with SessionLocal() as session:
        service = PublicationService(PublicationRepository(session))
        if service.is_published(token_id):
            return
        try:
            if png is None or request != canonical:
                png = renderer.render(canonical)
        except ArtworkError as e:
            logger.error("Could not render token %d for publication: %s", token_id, e)
            return
        service.publish(token_id, canonical, png)
