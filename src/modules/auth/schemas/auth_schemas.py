from typing import Optional

from pydantic import BaseModel


class SessionResponse(BaseModel):
    user_id: str
    wallet_address: Optional[str] = None
    display_name: str
    ens_name: Optional[str] = None
