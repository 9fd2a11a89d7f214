from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from modules.auth.dependencies import get_current_session
from modules.auth.schemas.auth_schemas import SessionResponse
from modules.auth.services.auth_service import AuthService, WalletSession

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.get("/me", response_model=SessionResponse)
async def read_current_session(name: Optional[str] = None, session: WalletSession = Depends(get_current_session)):
    """Wallet autenticada y nombre a mostrar (nombre, ENS o dirección truncada)"""
    ens_name = None
    if session.wallet_address:
        ens_name = await run_in_threadpool(AuthService.lookup_ens, session.wallet_address)
    return SessionResponse(
        user_id=session.user_id,
        wallet_address=session.wallet_address,
        display_name=AuthService.display_name(name or ens_name, session.wallet_address),
        ens_name=ens_name,
    )
