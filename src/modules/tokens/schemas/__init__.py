from .token_schemas import (
    SignatureMetadataResponse, TokenUriResponse,
    UpdateTokenUriRequest, UpdateTokenUriResponse
)

__all__ = [
    'SignatureMetadataResponse', 'TokenUriResponse',
    'UpdateTokenUriRequest', 'UpdateTokenUriResponse'
]
