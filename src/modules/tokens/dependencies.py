from functools import lru_cache

from fastapi import HTTPException, status

from modules.tokens.errors import ContractConfigurationError
from modules.tokens.services.contract_gateway import ContractGateway


@lru_cache
def _gateway() -> ContractGateway:
    return ContractGateway.from_config()


def get_contract_gateway() -> ContractGateway:
    try:
        return _gateway()
    except ContractConfigurationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error",
        )
