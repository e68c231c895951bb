import pytest
from httpx import AsyncClient

from cookbook.core.exceptions import Conflict, InvalidArgument, Unauthenticated
from cookbook.core.security import get_password_hash, verify_password
from cookbook.models import Gender, Role
from cookbook.schemas.user import UserCreate

PASSWORD = "testpassword123"


class TestAuthService:
    """Registration and credential checks."""

    @pytest.mark.asyncio
    async def test_register_and_authenticate(self, auth_service):
        """Test a registered user can authenticate with the same password."""
        user_id = await auth_service.register(UserCreate(name="carol", password="s3cret"))

        identity = await auth_service.authenticate(user_id, "s3cret")

        assert identity.user_id == user_id
        assert identity.is_admin is False

    @pytest.mark.asyncio
    async def test_password_is_stored_hashed(self, auth_service, sessions):
        """Test the stored credential is a bcrypt hash, not the password."""
        from sqlalchemy import select
        from cookbook.models import User

        user_id = await auth_service.register(UserCreate(name="carol", password="s3cret"))

        async with sessions() as session:
            stored = (await session.execute(
                select(User.hashed_password).where(User.id == user_id)
            )).scalar_one()

        assert stored != "s3cret"
        assert verify_password("s3cret", stored)

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service, alice):
        """Test a wrong password is rejected."""
        with pytest.raises(Unauthenticated):
            await auth_service.authenticate(alice.user_id, "not-the-password")

    @pytest.mark.asyncio
    async def test_unknown_user(self, auth_service):
        """Test an unknown id is rejected."""
        with pytest.raises(Unauthenticated):
            await auth_service.authenticate(9999, PASSWORD)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id,password", [(None, PASSWORD), (0, PASSWORD), (-3, PASSWORD), (1, ""), (1, None)])
    async def test_missing_credentials(self, auth_service, alice, user_id, password):
        """Test empty or non-positive credentials never reach the store."""
        with pytest.raises(Unauthenticated):
            await auth_service.authenticate(user_id, password)

    @pytest.mark.asyncio
    async def test_deleted_user_cannot_authenticate(self, auth_service, user_service, alice):
        """Test soft-deleted accounts fail authentication."""
        await user_service.delete_account(alice, alice.user_id)

        with pytest.raises(Unauthenticated):
            await auth_service.authenticate(alice.user_id, PASSWORD)

    @pytest.mark.asyncio
    async def test_duplicate_name(self, auth_service, alice):
        """Test registering a taken name fails."""
        with pytest.raises(Conflict):
            await auth_service.register(UserCreate(name="alice", password="other"))

    @pytest.mark.asyncio
    async def test_admin_capability(self, auth_service, make_user):
        """Test the administrator role shows up on the identity."""
        admin = await make_user("root", admin=True)

        assert admin.is_admin is True

    @pytest.mark.asyncio
    async def test_grant_role_twice_is_noop(self, auth_service, alice):
        """Test granting an existing role reports no change."""
        assert await auth_service.grant_role(alice.user_id, Role.ADMINISTRATOR) is True
        assert await auth_service.grant_role(alice.user_id, Role.ADMINISTRATOR) is False

    @pytest.mark.asyncio
    async def test_age_from_birthday(self, sessions, user_service):
        """Test age is computed from an ISO birthday."""
        from datetime import datetime, timezone
        from cookbook.services.auth import AuthService

        service = AuthService(sessions, clock=lambda: datetime(2024, 6, 15, tzinfo=timezone.utc))
        user_id = await service.register(
            UserCreate(name="dave", password="pw", gender=Gender.MALE, birthday="2000-06-16")
        )

        user = await user_service.get(user_id)
        assert user.age == 23
        assert user.gender == Gender.MALE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("birthday", ["16/06/2000", "2000-6-16", "June 16 2000", "2000-02-30"])
    async def test_ambiguous_birthday_rejected(self, auth_service, birthday):
        """Test birthdays not in YYYY-MM-DD form are rejected."""
        with pytest.raises(InvalidArgument):
            await auth_service.register(UserCreate(name="erin", password="pw", birthday=birthday))

    @pytest.mark.asyncio
    async def test_overlong_password_rejected(self, auth_service):
        """Test passwords bcrypt would truncate are rejected."""
        with pytest.raises(InvalidArgument):
            await auth_service.register(UserCreate(name="frank", password="x" * 73))

    def test_verify_password_rejects_non_hash(self):
        """Test a non-bcrypt stored value never matches."""
        assert verify_password("secret", "secret") is False
        assert verify_password("secret", get_password_hash("secret")) is True


class TestAuthApi:
    """Authentication endpoint tests."""

    @pytest.mark.asyncio
    async def test_register_success(self, client: AsyncClient):
        """Test successful user registration."""
        response = await client.post(
            "/auth/register",
            json={"name": "newuser", "password": "securepassword123"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "newuser"
        assert data["follower_count"] == 0
        assert "id" in data
        assert "hashed_password" not in data

    @pytest.mark.asyncio
    async def test_register_duplicate_name(self, client: AsyncClient):
        """Test registration with a duplicate name fails."""
        await client.post("/auth/register", json={"name": "dup", "password": "password123"})

        response = await client.post("/auth/register", json={"name": "dup", "password": "password123"})

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    @pytest.mark.asyncio
    async def test_get_me(self, client: AsyncClient, alice):
        """Test resolving basic-auth credentials."""
        response = await client.get("/auth/me", auth=(str(alice.user_id), PASSWORD))

        assert response.status_code == 200
        assert response.json() == {"user_id": alice.user_id, "is_admin": False}

    @pytest.mark.asyncio
    async def test_get_me_unauthorized(self, client: AsyncClient):
        """Test missing credentials are rejected."""
        response = await client.get("/auth/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Basic"

    @pytest.mark.asyncio
    async def test_get_me_non_numeric_id(self, client: AsyncClient):
        """Test a non-numeric username is rejected."""
        response = await client.get("/auth/me", auth=("alice", PASSWORD))

        assert response.status_code == 401
