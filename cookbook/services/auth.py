import re
from datetime import date, datetime, timezone
from typing import Callable, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.core.exceptions import Conflict, InvalidArgument, Unauthenticated
from cookbook.core.logging import get_logger
from cookbook.core.security import get_password_hash, verify_password
from cookbook.database import transaction, insert_ignoring_conflicts
from cookbook.models import User, UserRole, Role
from cookbook.schemas.user import UserCreate, Identity

logger = get_logger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# bcrypt only looks at the first 72 bytes of a secret
MAX_PASSWORD_BYTES = 72


class AuthService:
    """Registration and credential checks.

    ``authenticate`` is the gate every mutating operation goes through: it
    turns a claimed user id and a secret into an ``Identity`` carrying the
    administrator capability, or raises ``Unauthenticated``.
    """

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.sessions = sessions
        self.clock = clock

    async def register(self, user_data: UserCreate) -> int:
        """Register a new user and return its id."""
        if len(user_data.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidArgument("Password is longer than 72 bytes")

        age = user_data.age
        if age is None and user_data.birthday:
            age = self._age_from_birthday(user_data.birthday)

        async with transaction(self.sessions) as session:
            result = await session.execute(
                select(User.id).where(User.name == user_data.name)
            )
            if result.scalar_one_or_none() is not None:
                raise Conflict("Name already registered", resource="user")

            user = User(
                name=user_data.name,
                hashed_password=get_password_hash(user_data.password),
                gender=user_data.gender,
                age=age,
            )
            session.add(user)
            await session.flush()
            session.add(UserRole(user_id=user.id, role=Role.REGISTERED_USER))
            user_id = user.id

        logger.info("Registered user {} ({})", user_id, user_data.name)
        return user_id

    def _age_from_birthday(self, birthday: str) -> int:
        """Whole years between an ISO ``YYYY-MM-DD`` birthday and today."""
        if not _ISO_DATE.match(birthday):
            raise InvalidArgument(f"Birthday must be YYYY-MM-DD, got {birthday!r}")
        try:
            born = date.fromisoformat(birthday)
        except ValueError:
            raise InvalidArgument(f"Birthday is not a valid date: {birthday!r}")

        today = self.clock().date()
        if born > today:
            raise InvalidArgument("Birthday is in the future")
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))

    async def authenticate(self, user_id: Optional[int], password: Optional[str]) -> Identity:
        """Resolve credentials to an Identity. Never writes."""
        if not user_id or user_id <= 0 or not password:
            raise Unauthenticated("Missing credentials")

        async with transaction(self.sessions) as session:
            result = await session.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()

            if not user or user.is_deleted:
                logger.debug("Authentication failed: user {} unknown or deleted", user_id)
                raise Unauthenticated("Invalid user id or password")

            if not verify_password(password, user.hashed_password):
                logger.debug("Authentication failed: wrong password for user {}", user_id)
                raise Unauthenticated("Invalid user id or password")

            result = await session.execute(
                select(UserRole.id).where(
                    UserRole.user_id == user_id,
                    UserRole.role == Role.ADMINISTRATOR,
                )
            )
            is_admin = result.first() is not None

        return Identity(user_id=user_id, is_admin=is_admin)

    async def grant_role(self, user_id: int, role: Role) -> bool:
        """Assign a role; returns False when the user already had it."""
        async with transaction(self.sessions) as session:
            result = await session.execute(
                insert_ignoring_conflicts(session, UserRole, user_id=user_id, role=role)
            )
            granted = result.rowcount > 0

        if granted:
            logger.info("Granted role {} to user {}", role.value, user_id)
        return granted
