import uuid
import enum
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Uuid, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.db.base import Base


class Reaction(str, enum.Enum):
    like = "like"
    dislike = "dislike"


class Like(Base):
    """A user's reaction to exactly one target: a video (like/dislike) or a comment (like)."""

    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_user_comment"),
        CheckConstraint(
            "(video_id IS NULL) <> (comment_id IS NULL)", name="ck_likes_single_target"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    liked_by_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    video_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    comment_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    reaction: Mapped[str] = mapped_column(String(16), nullable=False, default=Reaction.like.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
