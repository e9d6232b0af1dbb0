"""SqlStore behaviour against a temporary SQLite database."""

from datetime import datetime, timedelta, timezone

import pytest

from vertex.store import SqlStore


async def _prediction(store: SqlStore, name: str = "A vs B", event_date: datetime | None = None):
    return await store.create_prediction(
        match_name=name,
        sport="soccer",
        odds=1.8,
        event_date=event_date or datetime(2030, 1, 1, tzinfo=timezone.utc),
        tipster_name="X",
        created_by=None,
    )


class TestUsers:
    @pytest.mark.asyncio
    async def test_duplicate_email_returns_none(self, store):
        assert await store.create_user("dup@example.com", "hash") is not None
        assert await store.create_user("dup@example.com", "hash") is None

    @pytest.mark.asyncio
    async def test_lookup_by_email_ignores_case(self, store):
        created = await store.create_user("case@example.com", "hash")
        found = await store.get_user_by_email("CASE@Example.com")
        assert found is not None
        assert found.id == created.id

    @pytest.mark.asyncio
    async def test_update_role_unknown_user(self, store):
        assert await store.update_user_role(999, "admin") is None

    @pytest.mark.asyncio
    async def test_timestamps_are_utc(self, store):
        user = await store.create_user("tz@example.com", "hash")
        fetched = await store.get_user_by_id(user.id)
        assert fetched.created_at.tzinfo == timezone.utc


class TestPredictions:
    @pytest.mark.asyncio
    async def test_round_trip_event_date(self, store):
        created = await _prediction(store)
        fetched = await store.get_prediction(created.id)
        assert fetched.event_date == datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert fetched.status == "pending"

    @pytest.mark.asyncio
    async def test_upcoming_excludes_past(self, store):
        now = datetime.now(timezone.utc)
        await _prediction(store, "past", now - timedelta(hours=1))
        await _prediction(store, "future", now + timedelta(hours=1))

        upcoming = await store.list_upcoming(None, now)
        assert [p.match_name for p in upcoming] == ["future"]

    @pytest.mark.asyncio
    async def test_resolve_only_from_pending(self, store):
        prediction = await _prediction(store)

        won = await store.resolve_prediction(prediction.id, "won")
        assert won is not None
        assert won.status == "won"

        assert await store.resolve_prediction(prediction.id, "lost") is None
        assert (await store.get_prediction(prediction.id)).status == "won"

    @pytest.mark.asyncio
    async def test_resolve_unknown(self, store):
        assert await store.resolve_prediction(999, "won") is None

    @pytest.mark.asyncio
    async def test_list_recent_limit(self, store):
        for i in range(5):
            await _prediction(store, f"p{i}")
        recent = await store.list_recent(3)
        assert [p.match_name for p in recent] == ["p4", "p3", "p2"]
        assert len(await store.list_recent()) == 5


class TestFollows:
    @pytest.mark.asyncio
    async def test_duplicate_follow_returns_none(self, store):
        user = await store.create_user("f@example.com", "hash")
        prediction = await _prediction(store)

        assert await store.add_follow(user.id, prediction.id) is not None
        assert await store.add_follow(user.id, prediction.id) is None
        assert await store.list_follower_ids(prediction.id) == [user.id]

    @pytest.mark.asyncio
    async def test_follow_state_is_per_user(self, store):
        alice = await store.create_user("alice@example.com", "hash")
        bob = await store.create_user("bob@example.com", "hash")
        prediction = await _prediction(store)
        await store.add_follow(alice.id, prediction.id)

        assert [p.is_followed for p in await store.list_with_follow_state(alice.id)] == [True]
        assert [p.is_followed for p in await store.list_with_follow_state(bob.id)] == [False]
        assert await store.is_following(alice.id, prediction.id)
        assert not await store.is_following(bob.id, prediction.id)

    @pytest.mark.asyncio
    async def test_list_followed_filters_by_status(self, store):
        user = await store.create_user("f@example.com", "hash")
        first = await _prediction(store, "first")
        second = await _prediction(store, "second")
        await store.add_follow(user.id, first.id)
        await store.add_follow(user.id, second.id)
        await store.resolve_prediction(first.id, "lost")

        assert [p.match_name for p in await store.list_followed(user.id)] == ["second", "first"]
        lost = await store.list_followed(user.id, "lost")
        assert [p.match_name for p in lost] == ["first"]
        assert lost[0].saved_at is not None


class TestNotifications:
    @pytest.mark.asyncio
    async def test_mark_read_checks_owner(self, store):
        owner = await store.create_user("owner@example.com", "hash")
        intruder = await store.create_user("intruder@example.com", "hash")
        note = await store.create_notification(owner.id, "hi", "new_tip")

        assert await store.mark_notification_read(note.id, intruder.id) is False
        assert await store.count_unread(owner.id) == 1
        assert await store.mark_notification_read(note.id, owner.id) is True
        assert await store.count_unread(owner.id) == 0

    @pytest.mark.asyncio
    async def test_mark_all_read_counts_changes(self, store):
        user = await store.create_user("n@example.com", "hash")
        for i in range(2):
            await store.create_notification(user.id, f"n{i}", "result")
        assert await store.mark_all_notifications_read(user.id) == 2
        assert await store.mark_all_notifications_read(user.id) == 0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_ping(self, store):
        await store.ping()  # Should not raise

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, store):
        await store.init()
        assert await store.get_user_by_email("admin@vertex.com") is not None
