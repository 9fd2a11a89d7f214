from typing import Optional

from pydantic import BaseModel, Field


class SignatureMetadataResponse(BaseModel):
    model_config = {"populate_by_name": True}

    name: str
    timestamp: Optional[int] = None
    signer: str


class TokenUriResponse(BaseModel):
    model_config = {"populate_by_name": True}

    token_id: int = Field(alias="tokenId")
    owner: str
    token_uri: str = Field(alias="tokenURI")
    metadata: SignatureMetadataResponse


class UpdateTokenUriRequest(BaseModel):
    model_config = {"populate_by_name": True}

    metadata_url: str = Field(alias="metadataUrl", min_length=1)


class UpdateTokenUriResponse(BaseModel):
    model_config = {"populate_by_name": True}

    success: bool = True
    transaction_hash: str = Field(alias="transactionHash")
    message: str = "Token URI updated successfully"
