from datetime import datetime
from uuid import UUID

from vidtube.schemas.common import CamelModel, NonBlankStr, OwnerSummary, TrimmedStr


class PlaylistCreate(CamelModel):
    name: NonBlankStr
    description: TrimmedStr = ""


class PlaylistUpdate(CamelModel):
    name: TrimmedStr | None = None
    description: TrimmedStr | None = None


class PlaylistVideoResponse(CamelModel):
    id: UUID
    title: str
    thumbnail: str
    duration: float
    views: int
    owner_id: UUID
    owner: OwnerSummary


class PlaylistResponse(CamelModel):
    id: UUID
    name: str
    description: str
    owner_id: UUID
    owner: OwnerSummary
    videos: list[PlaylistVideoResponse]
    created_at: datetime
    updated_at: datetime


class PlaylistPage(CamelModel):
    playlists: list[PlaylistResponse]
    total: int
    page: int
    limit: int
