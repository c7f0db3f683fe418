from datetime import datetime
from uuid import UUID

from pydantic import EmailStr

from vidtube.schemas.common import CamelModel, NonBlankStr


class UserResponse(CamelModel):
    id: UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None = None
    created_at: datetime


class UpdateAccountRequest(CamelModel):
    full_name: NonBlankStr
    email: EmailStr


class ChannelProfileResponse(CamelModel):
    id: UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None = None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool
