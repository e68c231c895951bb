import enum
from datetime import datetime, timezone
from sqlalchemy import String, Integer, DateTime, Boolean, Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from cookbook.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"


class Role(str, enum.Enum):
    REGISTERED_USER = "REGISTERED_USER"
    ADMINISTRATOR = "ADMINISTRATOR"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[Gender] = mapped_column(Enum(Gender, native_enum=False), default=Gender.UNKNOWN)
    age: Mapped[int] = mapped_column(Integer, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Derived from the follows table; only the follow toggle and account
    # deletion write these
    follower_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    following_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name})>"


class UserRole(Base):
    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role, native_enum=False), nullable=False)

    __table_args__ = (
        Index("idx_user_role", "user_id", "role", unique=True),
    )
