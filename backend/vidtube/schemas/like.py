from datetime import datetime
from uuid import UUID

from vidtube.models.like import Reaction
from vidtube.schemas.common import CamelModel


class ReactionRequest(CamelModel):
    reaction_type: Reaction


class VideoReactionState(CamelModel):
    like_count: int
    dislike_count: int
    is_liked: bool
    is_disliked: bool


class CommentLikeState(CamelModel):
    like_count: int
    is_liked: bool


class LikedVideo(CamelModel):
    id: UUID
    title: str
    thumbnail: str
    liked_at: datetime


class LikedVideos(CamelModel):
    liked_videos: list[LikedVideo]
    liked_videos_cnt: int
