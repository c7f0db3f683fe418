"""
Like/dislike associations.

Toggles are built from single conditional statements (DELETE ... WHERE,
UPDATE ... WHERE) plus an INSERT inside a savepoint, so two overlapping
requests from the same user cannot leave duplicate rows behind: the unique
constraints on (liked_by_id, video_id) and (liked_by_id, comment_id) reject
the second insert and it is treated as already applied.
"""
import logging
from uuid import UUID
from sqlalchemy import select, func, delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.like import Like, Reaction
from vidtube.models.video import Video

logger = logging.getLogger(__name__)


async def _insert_once(session: AsyncSession, like: Like) -> bool:
    try:
        async with session.begin_nested():
            session.add(like)
    except IntegrityError:
        logger.info(f"Concurrent like for user {like.liked_by_id} already stored")
        return False
    return True


async def get_video_reaction(session: AsyncSession, video_id: UUID, user_id: UUID) -> str | None:
    result = await session.execute(
        select(Like.reaction).where(Like.video_id == video_id, Like.liked_by_id == user_id)
    )
    return result.scalars().first()


async def count_video_reactions(session: AsyncSession, video_id: UUID) -> tuple[int, int]:
    result = await session.execute(
        select(Like.reaction, func.count())
        .where(Like.video_id == video_id)
        .group_by(Like.reaction)
    )
    counts = dict(result.all())
    return counts.get(Reaction.like.value, 0), counts.get(Reaction.dislike.value, 0)


async def toggle_video_reaction(
    session: AsyncSession, video_id: UUID, user_id: UUID, reaction: Reaction
) -> str | None:
    """
    Same reaction again removes it, the other reaction replaces it, no reaction creates it.
    Returns the user's reaction after the toggle.
    """
    removed = await session.execute(
        delete(Like).where(
            Like.video_id == video_id,
            Like.liked_by_id == user_id,
            Like.reaction == reaction.value,
        )
    )
    if removed.rowcount:
        return None

    switched = await session.execute(
        update(Like)
        .where(
            Like.video_id == video_id,
            Like.liked_by_id == user_id,
            Like.reaction != reaction.value,
        )
        .values(reaction=reaction.value)
        .execution_options(synchronize_session="fetch")
    )
    if switched.rowcount:
        return reaction.value

    await _insert_once(session, Like(video_id=video_id, liked_by_id=user_id, reaction=reaction.value))
    return reaction.value


async def is_comment_liked(session: AsyncSession, comment_id: UUID, user_id: UUID) -> bool:
    result = await session.execute(
        select(Like.id).where(Like.comment_id == comment_id, Like.liked_by_id == user_id).limit(1)
    )
    return result.scalars().first() is not None


async def count_comment_likes(session: AsyncSession, comment_id: UUID) -> int:
    return await session.scalar(
        select(func.count()).select_from(Like).where(Like.comment_id == comment_id)
    ) or 0


async def toggle_comment_like(session: AsyncSession, comment_id: UUID, user_id: UUID) -> bool:
    """Returns True if the comment is liked after the toggle."""
    removed = await session.execute(
        delete(Like).where(Like.comment_id == comment_id, Like.liked_by_id == user_id)
    )
    if removed.rowcount:
        return False
    await _insert_once(session, Like(comment_id=comment_id, liked_by_id=user_id, reaction=Reaction.like.value))
    return True


async def get_liked_videos(session: AsyncSession, user_id: UUID) -> list[tuple[Video, Like]]:
    # Inner join drops likes whose video has been deleted
    result = await session.execute(
        select(Video, Like)
        .join(Like, Like.video_id == Video.id)
        .where(Like.liked_by_id == user_id, Like.reaction == Reaction.like.value)
        .order_by(Like.created_at.desc())
    )
    return [(video, like) for video, like in result.all()]
