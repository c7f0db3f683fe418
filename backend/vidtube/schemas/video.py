from datetime import datetime
from uuid import UUID

from vidtube.schemas.common import CamelModel, OwnerSummary


class VideoResponse(CamelModel):
    id: UUID
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float
    views: int
    is_published: bool
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime


class VideoPage(CamelModel):
    videos: list[VideoResponse]
    total: int
    page: int
    limit: int
    total_pages: int
