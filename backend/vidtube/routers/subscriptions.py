import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.session import get_db
from vidtube.db.repositories import subscription_repo, user_repo
from vidtube.dependencies import get_current_user
from vidtube.models.user import User
from vidtube.schemas.common import ApiResponse, OwnerSummary, api_response
from vidtube.schemas.subscription import (
    ChannelSubscribers,
    SubscribedChannel,
    SubscriptionStatus,
    SubscriptionToggled,
)
from vidtube.services.permissions import ensure_owner

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status/{channel_id}", response_model=ApiResponse[SubscriptionStatus])
async def get_subscription_status(
    channel_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subscribed = await subscription_repo.is_subscribed(db, current_user.id, channel_id)
    return api_response(SubscriptionStatus(is_subscribed=subscribed), "Subscription status fetched")


@router.post("/c/{channel_id}", response_model=ApiResponse[SubscriptionToggled])
async def toggle_subscription(
    channel_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not await user_repo.get_user_by_id(db, channel_id):
        raise HTTPException(status_code=404, detail="Channel not found")
    if channel_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot subscribe to your own channel")

    subscribed = await subscription_repo.toggle_subscription(db, current_user.id, channel_id)
    await db.commit()
    logger.info(f"User {current_user.id} {'subscribed to' if subscribed else 'unsubscribed from'} {channel_id}")
    data = SubscriptionToggled(
        is_subscribed=subscribed,
        subscriber_count=await subscription_repo.count_subscribers(db, channel_id),
    )
    return api_response(data, "Subscribed successfully" if subscribed else "Unsubscribed successfully")


@router.get("/c/{channel_id}", response_model=ApiResponse[ChannelSubscribers])
async def get_channel_subscribers(
    channel_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not await user_repo.get_user_by_id(db, channel_id):
        raise HTTPException(status_code=404, detail="Channel not found")
    subscribers = await subscription_repo.get_subscribers(db, channel_id)
    data = ChannelSubscribers(
        channel_id=channel_id,
        subscriber_count=len(subscribers),
        subscribers=[OwnerSummary.model_validate(u) for u in subscribers],
    )
    return api_response(data, "Subscriber list fetched successfully")


@router.get("/u/{subscriber_id}", response_model=ApiResponse[list[SubscribedChannel]])
async def get_subscribed_channels(
    subscriber_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_owner(current_user.id, subscriber_id, "You are not authorized to view this subscriber's channels")
    channels = await subscription_repo.get_subscribed_channels(db, subscriber_id)
    return api_response(
        [SubscribedChannel.model_validate(c) for c in channels],
        "Subscribed channels fetched successfully",
    )
