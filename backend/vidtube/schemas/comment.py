from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field

from vidtube.schemas.common import CamelModel, NonBlankStr, OwnerSummary


class CommentCreate(CamelModel):
    content: NonBlankStr = Field(validation_alias=AliasChoices("content", "text"))


class CommentUpdate(CamelModel):
    content: NonBlankStr = Field(validation_alias=AliasChoices("content", "text"))


class CommentResponse(CamelModel):
    id: UUID
    video_id: UUID
    content: str
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime


class CommentPage(CamelModel):
    comments: list[CommentResponse]
    total_comments: int
    page: int
    limit: int


class CommentCreated(CamelModel):
    comment: CommentResponse
    comment_count: int
