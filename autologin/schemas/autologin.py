from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class AutologinLinkCreate(BaseModel):
    user_id: int
    path: Optional[str] = Field(
        None, max_length=2048, description="Where to send the user after login; defaults to the configured redirect"
    )


class AutologinLinkResponse(BaseModel):
    url: str


class AutologinTokenResponse(BaseModel):
    """Token details without the secret token value."""
    id: int
    user_id: int
    path: Optional[str] = None
    count: int
    created_at: datetime

    class Config:
        from_attributes = True


class SweepResponse(BaseModel):
    deleted: int
