import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from jose import JWTError, jwt
from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import Web3Exception

import config

logger = logging.getLogger(__name__)

# Configuración de Privy
ALGORITHM = "ES256"
ISSUER = "privy.io"


class AuthConfigurationError(Exception):
    """Falta configurar el app id o la clave de verificación de Privy"""
    pass


@dataclass(frozen=True)
class WalletSession:
    user_id: str
    wallet_address: Optional[str] = None
    claims: dict = field(default_factory=dict)


class AuthService:

    @staticmethod
    def verify_token(token: str, verification_key: Optional[str] = None, app_id: Optional[str] = None) -> Optional[dict]:
        """Verifica el access token de Privy y retorna sus claims"""
        key = verification_key or config.PRIVY_VERIFICATION_KEY
        audience = app_id or config.PRIVY_APP_ID
        if not key or not audience:
            raise AuthConfigurationError("PRIVY_APP_ID and PRIVY_VERIFICATION_KEY must be set")
        try:
            claims = jwt.decode(token, key, algorithms=[ALGORITHM], audience=audience, issuer=ISSUER)
        except JWTError as e:
            logger.info("Rejected access token: %s", e)
            return None
        if not claims.get("sub"):
            return None
        return claims

    @staticmethod
    def wallet_from_claims(claims: dict) -> Optional[str]:
        """Primera wallet vinculada en el claim linked_accounts"""
        accounts = claims.get("linked_accounts") or []
        if isinstance(accounts, str):
            try:
                accounts = json.loads(accounts)
            except ValueError:
                return None
        for account in accounts:
            if isinstance(account, dict) and account.get("type") == "wallet" and account.get("address"):
                return account["address"]
        return None

    @staticmethod
    def session_from_claims(claims: dict, wallet_header: Optional[str] = None) -> WalletSession:
        wallet = AuthService.wallet_from_claims(claims) or wallet_header
        return WalletSession(user_id=claims["sub"], wallet_address=wallet, claims=claims)

    @staticmethod
    def truncate_address(address: Optional[str]) -> str:
        return f"0x{address[2:5]}...{address[-5:]}" if address else ""

    @staticmethod
    def display_name(name: Optional[str], address: Optional[str]) -> str:
        return name or AuthService.truncate_address(address)

    @staticmethod
    def lookup_ens(address: str, web3: Optional[Web3] = None) -> Optional[str]:
        """Nombre ENS reverso de la dirección, si existe"""
        if web3 is None:
            if not config.ENS_RPC_URL:
                return None
            web3 = Web3(Web3.HTTPProvider(config.ENS_RPC_URL))
        try:
            return web3.ens.name(Web3.to_checksum_address(address))
        except (Web3Exception, RequestException, ValueError) as e:
            logger.warning("ENS lookup for %s failed: %s", address, e)
            return None
