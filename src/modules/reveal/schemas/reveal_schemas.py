from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from modules.reveal.models.publication import PublicationStatus


class PublicationResponse(BaseModel):
    token_id: int
    signer_name: str
    date_label: str
    status: PublicationStatus
    artwork_cid: Optional[str] = None
    metadata_cid: Optional[str] = None
    token_uri: Optional[str] = None
    transaction_hash: Optional[str] = None
    attempts: int
    last_error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
