from sqlalchemy import select, update, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.core.exceptions import InvalidArgument, NotFound
from cookbook.core.logging import get_logger
from cookbook.database import transaction
from cookbook.models import User, Follow
from cookbook.schemas.user import UserRecord, UserUpdate, Identity
from cookbook.services.follow import follower_ids, following_ids, recount_follows
from cookbook.services.ownership import require_owner

logger = get_logger(__name__)


class UserService:
    """User records, profile updates and account deletion."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def get(self, user_id: int) -> UserRecord:
        """Get a live user with the ids of its followers and followees."""
        async with transaction(self.sessions) as session:
            user = await self._load_live(session, user_id)
            record = UserRecord.model_validate(user)
            record.follower_ids = await follower_ids(session, user_id)
            record.following_ids = await following_ids(session, user_id)
        return record

    async def update_profile(self, identity: Identity, data: UserUpdate) -> UserRecord:
        """Update the caller's own gender and/or age."""
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            raise InvalidArgument("Nothing to update")
        if "age" in update_data and update_data["age"] <= 0:
            raise InvalidArgument("Age must be positive")

        async with transaction(self.sessions) as session:
            await self._load_live(session, identity.user_id)
            await session.execute(
                update(User).where(User.id == identity.user_id).values(**update_data)
            )

        return await self.get(identity.user_id)

    async def delete_account(self, identity: Identity, user_id: int) -> None:
        """Soft-delete an account and drop every follow edge touching it.

        Allowed for the account holder and for administrators. Counterpart
        users get their counters recomputed in the same transaction.
        """
        require_owner(identity, user_id, resource="user", resource_id=user_id)

        async with transaction(self.sessions) as session:
            await self._load_live(session, user_id)

            result = await session.execute(
                select(Follow.follower_id, Follow.followee_id).where(
                    or_(Follow.follower_id == user_id, Follow.followee_id == user_id)
                )
            )
            counterparts = {
                followee if follower == user_id else follower
                for follower, followee in result.all()
            }

            await session.execute(
                delete(Follow)
                .where(or_(Follow.follower_id == user_id, Follow.followee_id == user_id))
                .execution_options(synchronize_session=False)
            )
            if counterparts:
                await recount_follows(session, sorted(counterparts))

            await session.execute(
                update(User)
                .where(User.id == user_id)
                .values(is_deleted=True, follower_count=0, following_count=0)
            )

        logger.info(
            "User {} deleted account {} ({} follow edge counterpart(s) recounted)",
            identity.user_id, user_id, len(counterparts),
        )

    async def _load_live(self, session: AsyncSession, user_id: int) -> User:
        result = await session.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user or user.is_deleted:
            raise NotFound("User not found", resource="user", resource_id=user_id)
        return user
