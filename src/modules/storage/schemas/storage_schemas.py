from pydantic import BaseModel, Field


class PinResponse(BaseModel):
    model_config = {"populate_by_name": True}

    ipfs_hash: str = Field(alias="IpfsHash")
    uri: str
