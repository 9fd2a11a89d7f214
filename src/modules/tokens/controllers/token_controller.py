import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from modules.auth.dependencies import require_token_owner
from modules.tokens.dependencies import get_contract_gateway
from modules.tokens.errors import ContractConfigurationError, ContractError
from modules.tokens.schemas.token_schemas import (
    SignatureMetadataResponse, TokenUriResponse,
    UpdateTokenUriRequest, UpdateTokenUriResponse
)
from modules.tokens.services.contract_gateway import ContractGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tokens", tags=["tokens"])


def contract_http_error(error: ContractError, action: str) -> HTTPException:
    if isinstance(error, ContractConfigurationError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server configuration error")
    logger.error("%s failed: %s", action, error)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to {action}: {error}")


@router.get("/{token_id}/metadata", response_model=SignatureMetadataResponse)
async def get_token_metadata(token_id: int, gateway: ContractGateway = Depends(get_contract_gateway)):
    """Fecha y firmante registrados on-chain"""
    try:
        metadata = await run_in_threadpool(gateway.signature_metadata, token_id)
    except ContractError as e:
        raise contract_http_error(e, "fetch token metadata")
    return SignatureMetadataResponse(name=metadata.name, timestamp=metadata.timestamp, signer=metadata.signer)


@router.get("/{token_id}/uri", response_model=TokenUriResponse)
async def check_token_uri(token_id: int, gateway: ContractGateway = Depends(get_contract_gateway)):
    try:
        owner = await run_in_threadpool(gateway.owner_of, token_id)
        token_uri = await run_in_threadpool(gateway.token_uri, token_id)
        metadata = await run_in_threadpool(gateway.signature_metadata, token_id)
    except ContractError as e:
        raise contract_http_error(e, "check token URI")
    return TokenUriResponse(
        token_id=token_id,
        owner=owner,
        token_uri=token_uri,
        metadata=SignatureMetadataResponse(name=metadata.name, timestamp=metadata.timestamp, signer=metadata.signer),
    )


@router.post("/{token_id}/uri", response_model=UpdateTokenUriResponse)
async def update_token_uri(
    token_id: int,
    body: UpdateTokenUriRequest,
    gateway: ContractGateway = Depends(get_contract_gateway),
    owner: str = Depends(require_token_owner),
):
    """Actualiza el tokenURI (solo el dueño del token)"""
    try:
        tx_hash = await run_in_threadpool(gateway.set_token_uri, token_id, body.metadata_url)
    except ContractError as e:
        raise contract_http_error(e, "update token URI")
    return UpdateTokenUriResponse(transaction_hash=tx_hash)
