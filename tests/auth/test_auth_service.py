"""AuthService tests against the SQL store."""

import argon2
import pytest

from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD
from vertex.auth.password import check_needs_rehash
from vertex.auth.service import AuthService, seed_admin
from vertex.errors import InvalidCredentials, ValidationError


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_outdated_hash_is_upgraded_on_login(self, store, settings):
        weak = argon2.PasswordHasher(time_cost=1, memory_cost=8192, parallelism=1)
        user = await store.create_user("legacy@example.com", weak.hash("legacy-pass"))

        token, authed = await AuthService(store, settings).authenticate("legacy@example.com", "legacy-pass")

        assert token
        assert authed.id == user.id
        stored = await store.get_user_by_id(user.id)
        assert stored.password_hash != user.password_hash
        assert check_needs_rehash(stored.password_hash) is False

    @pytest.mark.asyncio
    async def test_bad_password(self, store, settings):
        with pytest.raises(InvalidCredentials):
            await AuthService(store, settings).authenticate(ADMIN_EMAIL, "wrong-password")


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_normalizes_email(self, store, settings):
        _token, user = await AuthService(store, settings).register("  Mixed@Example.COM ", "secret-1")
        assert user.email == "mixed@example.com"
        assert user.role == "user"

    @pytest.mark.asyncio
    async def test_duplicate(self, store, settings):
        service = AuthService(store, settings)
        await service.register("dup@example.com", "secret-1")
        with pytest.raises(ValidationError, match="Email already registered"):
            await service.register("dup@example.com", "secret-2")


class TestSeedAdmin:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, store, settings):
        again = await seed_admin(store, settings)
        assert again is not None
        assert again.email == ADMIN_EMAIL
        users = await store.list_users()
        assert [u.email for u in users].count(ADMIN_EMAIL) == 1

    @pytest.mark.asyncio
    async def test_seeded_admin_can_log_in(self, store, settings):
        _token, user = await AuthService(store, settings).authenticate(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert user.role == "admin"

    @pytest.mark.asyncio
    async def test_seed_disabled(self, store, settings):
        disabled = settings.model_copy(update={"seed_admin": False, "admin_email": "other-admin@vertex.com"})
        assert await seed_admin(store, disabled) is None
        assert await store.get_user_by_email("other-admin@vertex.com") is None
