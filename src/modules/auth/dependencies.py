from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from modules.auth.services.auth_service import AuthConfigurationError, AuthService, WalletSession
from modules.tokens.dependencies import get_contract_gateway
from modules.tokens.errors import ContractError
from modules.tokens.services.contract_gateway import ContractGateway

security = HTTPBearer()


def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    x_wallet_address: Optional[str] = Header(default=None),
) -> WalletSession:
    """Dependency para obtener la sesión de wallet autenticada"""
    try:
        claims = AuthService.verify_token(credentials.credentials)
    except AuthConfigurationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error",
        )
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthService.session_from_claims(claims, x_wallet_address)


async def require_token_owner(
    token_id: int,
    session: WalletSession = Depends(get_current_session),
    gateway: ContractGateway = Depends(get_contract_gateway),
) -> str:
    """Verifica que la wallet autenticada sea dueña del token"""
    try:
        owner = await run_in_threadpool(gateway.owner_of, token_id)
    except ContractError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to check token owner: {e}")
    if not session.wallet_address or session.wallet_address.lower() != owner.lower():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the token owner can perform this action",
        )
    return owner
