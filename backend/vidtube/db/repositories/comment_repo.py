from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.comment import Comment


async def get_comment_by_id(session: AsyncSession, comment_id: UUID) -> Comment | None:
    result = await session.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .options(selectinload(Comment.owner))
        .execution_options(populate_existing=True)
    )
    return result.scalars().one_or_none()


async def count_comments(session: AsyncSession, video_id: UUID, query: str | None = None) -> int:
    q = select(func.count()).select_from(Comment).where(Comment.video_id == video_id)
    if query:
        q = q.where(Comment.content.icontains(query, autoescape=True))
    return await session.scalar(q) or 0


async def get_comments_by_video(
    session: AsyncSession,
    video_id: UUID,
    page: int = 1,
    limit: int = 10,
    query: str | None = None,
) -> list[Comment]:
    q = select(Comment).where(Comment.video_id == video_id)
    if query:
        q = q.where(Comment.content.icontains(query, autoescape=True))
    result = await session.execute(
        q.options(selectinload(Comment.owner))
        .order_by(Comment.created_at.desc(), Comment.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all())


async def create_comment(session: AsyncSession, video_id: UUID, owner_id: UUID, content: str) -> Comment:
    comment = Comment(video_id=video_id, owner_id=owner_id, content=content)
    session.add(comment)
    await session.flush()
    return await get_comment_by_id(session, comment.id)


async def update_comment(session: AsyncSession, comment: Comment, content: str) -> Comment:
    comment.content = content
    await session.flush()
    return await get_comment_by_id(session, comment.id)


async def delete_comment(session: AsyncSession, comment: Comment) -> None:
    await session.delete(comment)
    await session.flush()
