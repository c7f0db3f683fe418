from datetime import datetime
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.playlist import Playlist, PlaylistVideo
from vidtube.models.video import Video


def _with_videos(q):
    return q.options(
        selectinload(Playlist.owner),
        selectinload(Playlist.entries).selectinload(PlaylistVideo.video).selectinload(Video.owner),
    )


async def get_playlist_by_id(session: AsyncSession, playlist_id: UUID) -> Playlist | None:
    result = await session.execute(
        _with_videos(select(Playlist).where(Playlist.id == playlist_id))
        .execution_options(populate_existing=True)
    )
    return result.scalars().one_or_none()


async def get_playlists_by_owner(
    session: AsyncSession,
    owner_id: UUID,
    page: int = 1,
    limit: int = 10,
    query: str | None = None,
) -> tuple[list[Playlist], int]:
    conditions = [Playlist.owner_id == owner_id]
    if query:
        conditions.append(Playlist.name.icontains(query, autoescape=True))
    total = await session.scalar(select(func.count()).select_from(Playlist).where(*conditions))
    result = await session.execute(
        _with_videos(select(Playlist).where(*conditions))
        .order_by(Playlist.created_at.desc(), Playlist.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def create_playlist(session: AsyncSession, owner_id: UUID, name: str, description: str) -> Playlist:
    playlist = Playlist(owner_id=owner_id, name=name, description=description)
    session.add(playlist)
    await session.flush()
    return await get_playlist_by_id(session, playlist.id)


async def update_playlist(session: AsyncSession, playlist: Playlist, **kwargs) -> Playlist:
    for key, value in kwargs.items():
        if hasattr(playlist, key):
            setattr(playlist, key, value)
    await session.flush()
    return await get_playlist_by_id(session, playlist.id)


async def delete_playlist(session: AsyncSession, playlist: Playlist) -> None:
    await session.delete(playlist)
    await session.flush()


def contains_video(playlist: Playlist, video_id: UUID) -> bool:
    return any(e.video_id == video_id for e in playlist.entries)


async def add_video(session: AsyncSession, playlist: Playlist, video_id: UUID) -> Playlist:
    position = max((e.position for e in playlist.entries), default=-1) + 1
    session.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id, position=position))
    playlist.updated_at = datetime.utcnow()
    await session.flush()
    return await get_playlist_by_id(session, playlist.id)


async def remove_video(session: AsyncSession, playlist: Playlist, video_id: UUID) -> Playlist:
    for entry in list(playlist.entries):
        if entry.video_id == video_id:
            playlist.entries.remove(entry)
    playlist.updated_at = datetime.utcnow()
    await session.flush()
    return await get_playlist_by_id(session, playlist.id)
