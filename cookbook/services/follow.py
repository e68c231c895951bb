from typing import Iterable, List, Optional
from sqlalchemy import select, update, delete, func, cast, Float
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.core.exceptions import InvalidArgument, NotFound
from cookbook.core.logging import get_logger
from cookbook.database import transaction, insert_ignoring_conflicts
from cookbook.models import User, Follow
from cookbook.schemas.user import Identity, FollowState, FollowResult, FollowRatio

logger = get_logger(__name__)


class FollowService:
    """The directed follow relation and the counters derived from it.

    Follow rows are only created or removed by ``toggle`` (and in bulk by
    account deletion). Counter updates run in the same transaction as the row
    change and are applied by the number of rows actually changed, so a
    concurrent toggle on the same pair can never push counts out of step with
    the rows.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def toggle(self, follower: Identity, followee_id: int) -> FollowResult:
        """Follow ``followee_id`` if not following yet, otherwise unfollow.

        Each call flips the state, so this must not be retried blindly.
        """
        follower_id = follower.user_id
        if follower_id == followee_id:
            raise InvalidArgument("Cannot follow yourself", resource="user", resource_id=followee_id)

        async with transaction(self.sessions) as session:
            result = await session.execute(
                select(User.id).where(User.id == followee_id, User.is_deleted.is_(False))
            )
            if result.scalar_one_or_none() is None:
                raise NotFound("User not found", resource="user", resource_id=followee_id)

            result = await session.execute(
                select(Follow.id).where(
                    Follow.follower_id == follower_id,
                    Follow.followee_id == followee_id,
                )
            )
            if result.scalar_one_or_none() is not None:
                result = await session.execute(
                    delete(Follow).where(
                        Follow.follower_id == follower_id,
                        Follow.followee_id == followee_id,
                    )
                )
                state, delta = FollowState.UNFOLLOWED, -result.rowcount
            else:
                result = await session.execute(
                    insert_ignoring_conflicts(
                        session, Follow, follower_id=follower_id, followee_id=followee_id
                    )
                )
                state, delta = FollowState.FOLLOWED, result.rowcount

            if delta:
                await session.execute(
                    update(User).where(User.id == follower_id)
                    .values(following_count=User.following_count + delta)
                    .execution_options(synchronize_session=False)
                )
                await session.execute(
                    update(User).where(User.id == followee_id)
                    .values(follower_count=User.follower_count + delta)
                    .execution_options(synchronize_session=False)
                )

            following_count, follower_count = await self._counts(session, follower_id, followee_id)

        logger.info("User {} {} user {}", follower_id, state.value.lower(), followee_id)
        return FollowResult(
            state=state,
            follower_id=follower_id,
            followee_id=followee_id,
            following_count=following_count,
            follower_count=follower_count,
        )

    async def _counts(self, session: AsyncSession, follower_id: int, followee_id: int):
        result = await session.execute(
            select(User.following_count).where(User.id == follower_id)
        )
        following_count = result.scalar_one()
        result = await session.execute(
            select(User.follower_count).where(User.id == followee_id)
        )
        follower_count = result.scalar_one()
        return following_count, follower_count

    async def is_following(self, follower_id: int, followee_id: int) -> bool:
        async with transaction(self.sessions) as session:
            result = await session.execute(
                select(Follow.id).where(
                    Follow.follower_id == follower_id,
                    Follow.followee_id == followee_id,
                )
            )
            return result.scalar_one_or_none() is not None

    async def get_follower_ids(self, user_id: int) -> List[int]:
        """Get IDs of everyone following ``user_id``."""
        async with transaction(self.sessions) as session:
            return await follower_ids(session, user_id)

    async def get_following_ids(self, user_id: int) -> List[int]:
        """Get IDs of everyone ``user_id`` follows."""
        async with transaction(self.sessions) as session:
            return await following_ids(session, user_id)

    async def recount(self, user_ids: Iterable[int]) -> None:
        """Recompute follower/following counts from the follow rows."""
        ids = list(user_ids)
        if not ids:
            return
        async with transaction(self.sessions) as session:
            await recount_follows(session, ids)
        logger.debug("Recounted follow counters for {} user(s)", len(ids))

    async def highest_follow_ratio(self) -> Optional[FollowRatio]:
        """Find the live user with the highest follower/following ratio.

        Users who follow nobody are skipped. Ties go to the lowest id.
        Returns None when no live user follows anyone.
        """
        ratio = cast(User.follower_count, Float) / User.following_count
        async with transaction(self.sessions) as session:
            result = await session.execute(
                select(User.id, User.name, User.follower_count, User.following_count, ratio)
                .where(User.following_count > 0, User.is_deleted.is_(False))
                .order_by(ratio.desc(), User.id)
                .limit(1)
            )
            row = result.first()

        if row is None:
            return None
        user_id, name, follower_count, following_count, value = row
        return FollowRatio(
            user_id=user_id,
            name=name,
            follower_count=follower_count,
            following_count=following_count,
            ratio=value,
        )


async def follower_ids(session: AsyncSession, user_id: int) -> List[int]:
    result = await session.execute(
        select(Follow.follower_id)
        .where(Follow.followee_id == user_id)
        .order_by(Follow.follower_id)
    )
    return list(result.scalars().all())


async def following_ids(session: AsyncSession, user_id: int) -> List[int]:
    result = await session.execute(
        select(Follow.followee_id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.followee_id)
    )
    return list(result.scalars().all())


async def recount_follows(session: AsyncSession, user_ids: List[int]) -> None:
    """Overwrite both counters of ``user_ids`` with counts of their follow rows."""
    followers = (
        select(func.count(Follow.id))
        .where(Follow.followee_id == User.id)
        .scalar_subquery()
    )
    following = (
        select(func.count(Follow.id))
        .where(Follow.follower_id == User.id)
        .scalar_subquery()
    )
    await session.execute(
        update(User)
        .where(User.id.in_(user_ids))
        .values(follower_count=followers, following_count=following)
        .execution_options(synchronize_session=False)
    )
