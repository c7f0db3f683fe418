from datetime import datetime
from uuid import UUID
from sqlalchemy import select, or_, func, update
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.video import Video
from vidtube.models.watch_history import WatchHistory

SORT_FIELDS = {
    "createdAt": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


async def get_video_by_id(session: AsyncSession, video_id: UUID) -> Video | None:
    result = await session.execute(
        select(Video)
        .where(Video.id == video_id)
        .options(selectinload(Video.owner))
        .execution_options(populate_existing=True)
    )
    return result.scalars().one_or_none()


async def list_published_videos(
    session: AsyncSession,
    page: int = 1,
    limit: int = 10,
    query: str | None = None,
    sort_by: str = "createdAt",
    sort_type: str = "desc",
    owner_id: UUID | None = None,
) -> tuple[list[Video], int]:
    conditions = [Video.is_published.is_(True)]
    if query:
        conditions.append(
            or_(
                Video.title.icontains(query, autoescape=True),
                Video.description.icontains(query, autoescape=True),
            )
        )
    if owner_id:
        conditions.append(Video.owner_id == owner_id)

    column = SORT_FIELDS[sort_by]
    order = column.asc() if sort_type == "asc" else column.desc()

    total = await session.scalar(select(func.count()).select_from(Video).where(*conditions))
    result = await session.execute(
        select(Video)
        .where(*conditions)
        .options(selectinload(Video.owner))
        .order_by(order, Video.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def create_video(
    session: AsyncSession,
    owner_id: UUID,
    title: str,
    description: str,
    video_file: str,
    thumbnail: str,
    duration: float,
) -> Video:
    video = Video(
        owner_id=owner_id,
        title=title,
        description=description,
        video_file=video_file,
        thumbnail=thumbnail,
        duration=duration,
        is_published=True,
    )
    session.add(video)
    await session.flush()
    return await get_video_by_id(session, video.id)


async def update_video(session: AsyncSession, video: Video, **kwargs) -> Video:
    for key, value in kwargs.items():
        if hasattr(video, key):
            setattr(video, key, value)
    await session.flush()
    return await get_video_by_id(session, video.id)


async def delete_video(session: AsyncSession, video: Video) -> None:
    await session.delete(video)
    await session.flush()


async def increment_views(session: AsyncSession, video_id: UUID) -> None:
    # Single UPDATE so concurrent viewers are all counted
    await session.execute(
        update(Video).where(Video.id == video_id).values(views=Video.views + 1)
    )


async def record_watch(session: AsyncSession, user_id: UUID, video_id: UUID) -> WatchHistory:
    """Put the video at the head of the user's history; a rewatch moves it up instead of duplicating."""
    existing = await session.execute(
        select(WatchHistory).where(
            WatchHistory.user_id == user_id,
            WatchHistory.video_id == video_id,
        )
    )
    entry = existing.scalars().first()
    if entry:
        entry.watched_at = datetime.utcnow()
        await session.flush()
        return entry
    entry = WatchHistory(user_id=user_id, video_id=video_id)
    session.add(entry)
    await session.flush()
    return entry


async def get_watch_history(session: AsyncSession, user_id: UUID, limit: int = 100) -> list[Video]:
    result = await session.execute(
        select(Video)
        .join(WatchHistory, WatchHistory.video_id == Video.id)
        .where(WatchHistory.user_id == user_id)
        .options(selectinload(Video.owner))
        .order_by(WatchHistory.watched_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
