from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from .common import CamelModel
from .property import PropertyRead


class RecommendRequest(CamelModel):
    to_user_email: str = Field(..., min_length=3, max_length=320)
    message: str = ""

    @field_validator("to_user_email")
    @classmethod
    def looks_like_email(cls, v):
        v = v.strip()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("toUserEmail must be an email address")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"toUserEmail": "friend@example.com", "message": "Thought you'd like this one"}
        }
    )


class UserRead(CamelModel):
    id: UUID
    email: str
    full_name: str


class RecommendationRead(CamelModel):
    id: UUID
    from_user_id: UUID
    to_user_id: UUID
    property_id: UUID
    message: str = ""
    created_at: datetime
    is_read: bool = False


class RecommendationDetail(RecommendationRead):
    property: PropertyRead
    sender: UserRead
