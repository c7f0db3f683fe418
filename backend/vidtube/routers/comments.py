from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.session import get_db
from vidtube.db.repositories import comment_repo, video_repo
from vidtube.dependencies import get_current_user
from vidtube.models.comment import Comment
from vidtube.models.user import User
from vidtube.schemas.comment import (
    CommentCreate,
    CommentCreated,
    CommentPage,
    CommentResponse,
    CommentUpdate,
)
from vidtube.schemas.common import ApiResponse, api_response
from vidtube.services.permissions import ensure_owner

router = APIRouter()


async def _get_owned_comment(db: AsyncSession, comment_id: UUID, user: User, action: str) -> Comment:
    comment = await comment_repo.get_comment_by_id(db, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    ensure_owner(user.id, comment.owner_id, f"You are not authorized to {action} this comment")
    return comment


@router.get("/{video_id}", response_model=ApiResponse[CommentPage])
async def list_video_comments(
    video_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: str | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not await video_repo.get_video_by_id(db, video_id):
        raise HTTPException(status_code=404, detail="Video not found")
    query = query.strip() if query else None
    comments = await comment_repo.get_comments_by_video(db, video_id, page=page, limit=limit, query=query)
    total = await comment_repo.count_comments(db, video_id, query=query)
    data = CommentPage(
        comments=[CommentResponse.model_validate(c) for c in comments],
        total_comments=total,
        page=page,
        limit=limit,
    )
    return api_response(data, "Comments fetched successfully")


@router.post("/{video_id}", response_model=ApiResponse[CommentCreated])
async def add_comment(
    video_id: UUID,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not await video_repo.get_video_by_id(db, video_id):
        raise HTTPException(status_code=404, detail="Video not found")
    comment = await comment_repo.create_comment(db, video_id, current_user.id, body.content)
    await db.commit()
    data = CommentCreated(
        comment=CommentResponse.model_validate(comment),
        comment_count=await comment_repo.count_comments(db, video_id),
    )
    return api_response(data, "Comment added successfully")


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentResponse])
async def update_comment(
    comment_id: UUID,
    body: CommentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = await _get_owned_comment(db, comment_id, current_user, "update")
    comment = await comment_repo.update_comment(db, comment, body.content)
    await db.commit()
    return api_response(CommentResponse.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[None])
async def delete_comment(
    comment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = await _get_owned_comment(db, comment_id, current_user, "delete")
    await comment_repo.delete_comment(db, comment)
    await db.commit()
    return api_response(None, "Comment deleted successfully")
