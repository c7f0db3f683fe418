from uuid import UUID
from sqlalchemy import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.user import User
from vidtube.models.subscription import Subscription


async def get_user_by_id(session: AsyncSession, user_id: UUID) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalars().one_or_none()


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username.strip().lower()))
    return result.scalars().one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    return result.scalars().one_or_none()


async def find_user_by_login(session: AsyncSession, username: str | None, email: str | None) -> User | None:
    conditions = []
    if username:
        conditions.append(User.username == username.strip().lower())
    if email:
        conditions.append(func.lower(User.email) == email.strip().lower())
    if not conditions:
        return None
    result = await session.execute(select(User).where(or_(*conditions)).limit(1))
    return result.scalars().first()


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    full_name: str,
    password_hash: str,
    avatar: str,
    cover_image: str | None = None,
) -> User:
    user = User(
        username=username.strip().lower(),
        email=email.strip(),
        full_name=full_name.strip(),
        password_hash=password_hash,
        avatar=avatar,
        cover_image=cover_image,
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


async def update_user(session: AsyncSession, user: User, **kwargs) -> User:
    for key, value in kwargs.items():
        if hasattr(user, key):
            setattr(user, key, value)
    await session.flush()
    await session.refresh(user)
    return user


async def set_refresh_token(session: AsyncSession, user: User, refresh_token: str | None) -> None:
    user.refresh_token = refresh_token
    await session.flush()


async def get_channel_counts(session: AsyncSession, user_id: UUID) -> tuple[int, int]:
    """(subscribers of the channel, channels the user is subscribed to)."""
    subscribers = await session.scalar(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == user_id)
    )
    subscribed_to = await session.scalar(
        select(func.count()).select_from(Subscription).where(Subscription.subscriber_id == user_id)
    )
    return subscribers or 0, subscribed_to or 0
