from datetime import datetime
from sqlalchemy import Integer, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from cookbook.database import Base
from cookbook.models.user import utcnow


class Follow(Base):
    __tablename__ = "follows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    follower_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    followee_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        Index("idx_follower", "follower_id"),
        Index("idx_followee", "followee_id"),
        Index("idx_follow_pair", "follower_id", "followee_id", unique=True),
        CheckConstraint("follower_id <> followee_id", name="ck_follow_no_self"),
    )

    def __repr__(self) -> str:
        return f"<Follow(follower={self.follower_id}, followee={self.followee_id})>"
