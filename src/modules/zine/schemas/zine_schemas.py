from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class ZineSubmission(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    address1: str = Field(min_length=1)
    address2: str = ""
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip: str = Field(min_length=1)


class ZineRequestResponse(BaseModel):
    id: int
    name: str
    email: str
    address1: str
    address2: str
    city: str
    state: str
    zip: str
    emailed: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class ZineSubmissionResponse(BaseModel):
    success: bool = True
    message: str = "Zine request received! We'll be in touch soon."
    data: ZineRequestResponse
