from datetime import datetime, timezone
from typing import Optional

from modules.artwork.models.render_request import Background, RenderRequest, Viewport
from modules.auth.services.auth_service import AuthService
from modules.reveal.errors import TokenNotMintedError
from modules.tokens.services.contract_gateway import ContractGateway


class RevealService:

    @staticmethod
    def format_date(timestamp: int) -> str:
        """Fecha on-chain en formato 'January 1, 2025' (UTC)"""
        moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        return f"{moment:%B} {moment.day}, {moment.year}"

    @staticmethod
    def resolve_request(
        gateway: ContractGateway,
        token_id: int,
        name: Optional[str] = None,
        transaction_hash: Optional[str] = None,
        wallet: Optional[str] = None,
        background: Background = Background.PAPER,
        viewport: Viewport = Viewport.DESKTOP,
    ) -> RenderRequest:
        """
        Construye la solicitud de render de un token a partir del contrato.
        El ordinal del firmante es el id del token y la firma es el hash de la
        transacción de minteo.
        """
        metadata = gateway.signature_metadata(token_id)
        if metadata.timestamp is None:
            raise TokenNotMintedError(f"No signature found for token {token_id}")

        display_name = (
            name
            or AuthService.display_name(None, wallet)
            or metadata.name
            or AuthService.display_name(None, metadata.signer)
        )
        return RenderRequest(
            display_name=display_name,
            date_label=RevealService.format_date(metadata.timestamp),
            signature_text=transaction_hash or "",
            signer_ordinal=token_id,
            background=background,
            viewport=viewport,
        )
