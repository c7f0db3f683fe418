import logging
from uuid import UUID
from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.subscription import Subscription
from vidtube.models.user import User

logger = logging.getLogger(__name__)


async def is_subscribed(session: AsyncSession, subscriber_id: UUID, channel_id: UUID) -> bool:
    result = await session.execute(
        select(Subscription.id)
        .where(Subscription.subscriber_id == subscriber_id, Subscription.channel_id == channel_id)
        .limit(1)
    )
    return result.scalars().first() is not None


async def count_subscribers(session: AsyncSession, channel_id: UUID) -> int:
    return await session.scalar(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == channel_id)
    ) or 0


async def toggle_subscription(session: AsyncSession, subscriber_id: UUID, channel_id: UUID) -> bool:
    """Returns True if subscribed after the toggle."""
    removed = await session.execute(
        delete(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
    )
    if removed.rowcount:
        return False
    try:
        async with session.begin_nested():
            session.add(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
    except IntegrityError:
        logger.info(f"Concurrent subscription {subscriber_id} -> {channel_id} already stored")
    return True


async def get_subscribers(session: AsyncSession, channel_id: UUID) -> list[User]:
    result = await session.execute(
        select(User)
        .join(Subscription, Subscription.subscriber_id == User.id)
        .where(Subscription.channel_id == channel_id)
        .order_by(Subscription.created_at.desc())
    )
    return list(result.scalars().all())


async def get_subscribed_channels(session: AsyncSession, subscriber_id: UUID) -> list[User]:
    result = await session.execute(
        select(User)
        .join(Subscription, Subscription.channel_id == User.id)
        .where(Subscription.subscriber_id == subscriber_id)
        .order_by(Subscription.created_at.desc())
    )
    return list(result.scalars().all())
