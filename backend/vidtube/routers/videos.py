import logging
import math
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.session import get_db
from vidtube.db.repositories import video_repo
from vidtube.dependencies import get_current_user, get_media_storage, get_optional_user
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.schemas.common import ApiResponse, api_response
from vidtube.schemas.video import VideoPage, VideoResponse
from vidtube.services.media_service import MediaStorage, MediaStorageError
from vidtube.services.permissions import ensure_owner, is_owner

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_video(db: AsyncSession, video_id: UUID, user: User) -> Video:
    video = await video_repo.get_video_by_id(db, video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    ensure_owner(user.id, video.owner_id, "You are not allowed to modify this video")
    return video


@router.get("", response_model=ApiResponse[VideoPage])
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: str | None = None,
    sort_by: Literal["createdAt", "views", "duration", "title"] = Query("createdAt", alias="sortBy"),
    sort_type: Literal["asc", "desc"] = Query("desc", alias="sortType"),
    user_id: UUID | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    videos, total = await video_repo.list_published_videos(
        db,
        page=page,
        limit=limit,
        query=query.strip() if query else None,
        sort_by=sort_by,
        sort_type=sort_type,
        owner_id=user_id,
    )
    data = VideoPage(
        videos=[VideoResponse.model_validate(v) for v in videos],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )
    return api_response(data, "Videos fetched successfully")


@router.post("", response_model=ApiResponse[VideoResponse], status_code=status.HTTP_201_CREATED)
async def publish_video(
    title: str = Form(...),
    description: str = Form(...),
    video_file: UploadFile | None = File(None, alias="videoFile"),
    thumbnail: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    if (
        not title.strip()
        or not description.strip()
        or video_file is None
        or not video_file.filename
        or thumbnail is None
        or not thumbnail.filename
    ):
        raise HTTPException(status_code=400, detail="Title, description, video and thumbnail are required")

    try:
        video_asset = await media.upload_file(video_file, resource_type="video")
        thumbnail_asset = await media.upload_file(thumbnail, resource_type="image")
    except MediaStorageError as e:
        raise HTTPException(status_code=500, detail=f"Upload to media host failed: {e}")

    video = await video_repo.create_video(
        db,
        owner_id=current_user.id,
        title=title.strip(),
        description=description.strip(),
        video_file=video_asset.url,
        thumbnail=thumbnail_asset.url,
        duration=video_asset.duration or 0,
    )
    await db.commit()
    logger.info(f"User {current_user.id} published video {video.id}")
    return api_response(VideoResponse.model_validate(video), "Video published successfully", status.HTTP_201_CREATED)


@router.get("/{video_id}", response_model=ApiResponse[VideoResponse])
async def get_video(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    video = await video_repo.get_video_by_id(db, video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    if not video.is_published and not (current_user and is_owner(current_user.id, video.owner_id)):
        raise HTTPException(status_code=404, detail="Video not found")

    await video_repo.increment_views(db, video.id)
    if current_user:
        await video_repo.record_watch(db, current_user.id, video.id)
    await db.commit()
    video = await video_repo.get_video_by_id(db, video.id)
    return api_response(VideoResponse.model_validate(video), "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoResponse])
async def update_video(
    video_id: UUID,
    title: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    video = await _get_owned_video(db, video_id, current_user)

    updates = {}
    if title and title.strip():
        updates["title"] = title.strip()
    if description and description.strip():
        updates["description"] = description.strip()
    has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
    if not updates and not has_thumbnail:
        raise HTTPException(
            status_code=400,
            detail="At least one field (title, description, thumbnail) must be provided",
        )

    old_thumbnail = video.thumbnail
    if has_thumbnail:
        try:
            asset = await media.upload_file(thumbnail, resource_type="image")
        except MediaStorageError as e:
            raise HTTPException(status_code=500, detail=f"Upload to media host failed: {e}")
        updates["thumbnail"] = asset.url

    video = await video_repo.update_video(db, video, **updates)
    await db.commit()

    if has_thumbnail:
        try:
            await media.destroy_url(old_thumbnail, resource_type="image")
        except MediaStorageError:
            logger.warning(f"Old thumbnail {old_thumbnail} was not removed from the media host")
    return api_response(VideoResponse.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[None])
async def delete_video(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    video = await _get_owned_video(db, video_id, current_user)
    try:
        await media.destroy_url(video.video_file, resource_type="video")
        await media.destroy_url(video.thumbnail, resource_type="image")
    except MediaStorageError as e:
        raise HTTPException(status_code=500, detail=f"Could not delete video media: {e}")

    await video_repo.delete_video(db, video)
    await db.commit()
    logger.info(f"User {current_user.id} deleted video {video_id}")
    return api_response(None, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoResponse])
@router.patch("/publish/{video_id}", response_model=ApiResponse[VideoResponse], include_in_schema=False)
async def toggle_publish_status(
    video_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await _get_owned_video(db, video_id, current_user)
    video = await video_repo.update_video(db, video, is_published=not video.is_published)
    await db.commit()
    state = "published" if video.is_published else "unpublished"
    return api_response(VideoResponse.model_validate(video), f"Video {state} successfully")
