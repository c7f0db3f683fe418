from uuid import UUID

from vidtube.schemas.common import CamelModel, OwnerSummary


class SubscriptionStatus(CamelModel):
    is_subscribed: bool


class SubscriptionToggled(SubscriptionStatus):
    subscriber_count: int


class ChannelSubscribers(CamelModel):
    channel_id: UUID
    subscriber_count: int
    subscribers: list[OwnerSummary]


class SubscribedChannel(OwnerSummary):
    cover_image: str | None = None
