import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.session import get_db
from vidtube.db.repositories import comment_repo, like_repo, video_repo
from vidtube.dependencies import get_current_user
from vidtube.models.like import Reaction
from vidtube.models.user import User
from vidtube.schemas.common import ApiResponse, api_response
from vidtube.schemas.like import (
    CommentLikeState,
    LikedVideo,
    LikedVideos,
    ReactionRequest,
    VideoReactionState,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _video_state(db: AsyncSession, video_id: UUID, user_id: UUID) -> VideoReactionState:
    like_count, dislike_count = await like_repo.count_video_reactions(db, video_id)
    reaction = await like_repo.get_video_reaction(db, video_id, user_id)
    return VideoReactionState(
        like_count=like_count,
        dislike_count=dislike_count,
        is_liked=reaction == Reaction.like.value,
        is_disliked=reaction == Reaction.dislike.value,
    )


async def _react(db: AsyncSession, video_id: UUID, user: User, reaction: Reaction) -> VideoReactionState:
    if not await video_repo.get_video_by_id(db, video_id):
        raise HTTPException(status_code=404, detail="Video not found")
    current = await like_repo.toggle_video_reaction(db, video_id, user.id, reaction)
    await db.commit()
    logger.info(f"User {user.id} reaction on video {video_id} is now {current}")
    return await _video_state(db, video_id, user.id)


@router.get("/v/{video_id}/count", response_model=ApiResponse[VideoReactionState])
async def get_video_like_count(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return api_response(await _video_state(db, video_id, current_user.id))


@router.post("/v/{video_id}", response_model=ApiResponse[VideoReactionState])
async def react_to_video(
    video_id: UUID,
    body: ReactionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    state = await _react(db, video_id, current_user, body.reaction_type)
    return api_response(state, "Reaction updated successfully")


@router.post("/toggle/v/{video_id}", response_model=ApiResponse[VideoReactionState])
async def toggle_video_like(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    state = await _react(db, video_id, current_user, Reaction.like)
    message = "Video liked successfully" if state.is_liked else "Video unliked successfully"
    return api_response(state, message)


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse[CommentLikeState])
async def toggle_comment_like(
    comment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not await comment_repo.get_comment_by_id(db, comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
    liked = await like_repo.toggle_comment_like(db, comment_id, current_user.id)
    await db.commit()
    state = CommentLikeState(
        like_count=await like_repo.count_comment_likes(db, comment_id),
        is_liked=liked,
    )
    message = "Comment liked successfully" if liked else "Comment unliked successfully"
    return api_response(state, message)


@router.get("/videos", response_model=ApiResponse[LikedVideos])
async def get_liked_videos(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = await like_repo.get_liked_videos(db, current_user.id)
    liked = [
        LikedVideo(id=video.id, title=video.title, thumbnail=video.thumbnail, liked_at=like.created_at)
        for video, like in rows
    ]
    return api_response(LikedVideos(liked_videos=liked, liked_videos_cnt=len(liked)), "Liked videos fetched successfully")
