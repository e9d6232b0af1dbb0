"""Supabase backend. Talks to the project's PostgREST endpoint over httpx.

Tables and column names are the same as the SQL backend. Row-level filters use
PostgREST operators (``id=eq.3``, ``event_date=gt.<iso>``, ...).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from vertex.errors import StoreError
from vertex.store.base import TipStore
from vertex.store.records import (
    FollowedPrediction,
    NotificationRecord,
    PredictionRecord,
    PredictionView,
    UserRecord,
)

logger = structlog.get_logger()

_UNIQUE_VIOLATION = "23505"
_USER_COLUMNS = "id,email,password_hash,role,created_at"


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SupabaseStore(TipStore):
    """``TipStore`` backed by Supabase's REST interface."""

    name = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = url.rstrip("/") + "/rest/v1"
        self._key = key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "apikey": self._key,
                    "Authorization": f"Bearer {self._key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        logger.info("store_initialized", backend=self.name, url=self.base_url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> None:
        await self._request("GET", "/predictions", params={"select": "id", "limit": "1"})

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        conflict_ok: bool = False,
    ) -> httpx.Response | None:
        """Send one request; returns None on a tolerated unique violation."""
        if self._client is None:
            msg = "Supabase store not initialized. Call init() first."
            raise StoreError(msg)
        try:
            response = await self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return response

        error = self._error_body(response)
        if conflict_ok and (response.status_code == 409 or error.get("code") == _UNIQUE_VIOLATION):
            return None
        raise StoreError(f"{method} {path} -> {response.status_code}: {error.get('message', response.text)}")

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        response = await self._request("GET", f"/{table}", params=params)
        return response.json()

    async def _insert(self, table: str, row: dict[str, Any], *, conflict_ok: bool = False) -> dict[str, Any] | None:
        response = await self._request(
            "POST",
            f"/{table}",
            json=[row],
            headers={"Prefer": "return=representation"},
            conflict_ok=conflict_ok,
        )
        if response is None:
            return None
        return response.json()[0]

    async def _update(
        self, table: str, filters: dict[str, str], values: dict[str, Any], *, select: str = "*"
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "PATCH",
            f"/{table}",
            params={**filters, "select": select},
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    @staticmethod
    def _content_range_total(response: httpx.Response) -> int:
        # e.g. "0-24/3573" or "*/0"
        content_range = response.headers.get("content-range", "*/0")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        rows = await self._select("users", {"select": _USER_COLUMNS, "email": f"eq.{email.lower()}", "limit": "1"})
        return UserRecord.model_validate(rows[0]) if rows else None

    async def get_user_by_id(self, user_id: int) -> UserRecord | None:
        rows = await self._select("users", {"select": _USER_COLUMNS, "id": f"eq.{user_id}", "limit": "1"})
        return UserRecord.model_validate(rows[0]) if rows else None

    async def create_user(self, email: str, password_hash: str, role: str = "user") -> UserRecord | None:
        row = await self._insert(
            "users",
            {"email": email, "password_hash": password_hash, "role": role, "created_at": _iso(_now())},
            conflict_ok=True,
        )
        return UserRecord.model_validate(row) if row else None

    async def list_users(self) -> list[UserRecord]:
        rows = await self._select("users", {"select": _USER_COLUMNS, "order": "created_at.desc,id.desc"})
        return [UserRecord.model_validate(r) for r in rows]

    async def update_user_role(self, user_id: int, role: str) -> UserRecord | None:
        rows = await self._update("users", {"id": f"eq.{user_id}"}, {"role": role}, select=_USER_COLUMNS)
        return UserRecord.model_validate(rows[0]) if rows else None

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        await self._update("users", {"id": f"eq.{user_id}"}, {"password_hash": password_hash}, select="id")

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    async def create_prediction(
        self,
        *,
        match_name: str,
        sport: str,
        odds: float,
        event_date: datetime,
        tipster_name: str,
        created_by: int | None,
    ) -> PredictionRecord:
        row = await self._insert(
            "predictions",
            {
                "match_name": match_name,
                "sport": sport,
                "odds": odds,
                "event_date": _iso(event_date),
                "tipster_name": tipster_name,
                "status": "pending",
                "created_by": created_by,
                "created_at": _iso(_now()),
            },
        )
        return PredictionRecord.model_validate(row)

    async def get_prediction(self, prediction_id: int) -> PredictionRecord | None:
        rows = await self._select("predictions", {"select": "*", "id": f"eq.{prediction_id}", "limit": "1"})
        return PredictionRecord.model_validate(rows[0]) if rows else None

    async def _followed_ids(self, user_id: int | None) -> set[int]:
        if user_id is None:
            return set()
        rows = await self._select("user_predictions", {"select": "prediction_id", "user_id": f"eq.{user_id}"})
        return {r["prediction_id"] for r in rows}

    async def list_upcoming(self, user_id: int | None, now: datetime) -> list[PredictionView]:
        rows = await self._select(
            "predictions",
            {"select": "*", "event_date": f"gt.{_iso(now)}", "order": "event_date.asc,id.asc"},
        )
        followed = await self._followed_ids(user_id)
        return [PredictionView.model_validate({**r, "is_followed": r["id"] in followed}) for r in rows]

    async def list_with_follow_state(self, user_id: int) -> list[PredictionView]:
        rows = await self._select("predictions", {"select": "*", "order": "event_date.asc,id.asc"})
        followed = await self._followed_ids(user_id)
        return [PredictionView.model_validate({**r, "is_followed": r["id"] in followed}) for r in rows]

    async def list_recent(self, limit: int | None = None) -> list[PredictionRecord]:
        params = {"select": "*", "order": "created_at.desc,id.desc"}
        if limit is not None:
            params["limit"] = str(limit)
        rows = await self._select("predictions", params)
        return [PredictionRecord.model_validate(r) for r in rows]

    async def resolve_prediction(self, prediction_id: int, status: str) -> PredictionRecord | None:
        rows = await self._update(
            "predictions",
            {"id": f"eq.{prediction_id}", "status": "eq.pending"},
            {"status": status},
        )
        return PredictionRecord.model_validate(rows[0]) if rows else None

    # ------------------------------------------------------------------
    # Follows
    # ------------------------------------------------------------------

    async def add_follow(self, user_id: int, prediction_id: int) -> datetime | None:
        saved_at = _now()
        row = await self._insert(
            "user_predictions",
            {"user_id": user_id, "prediction_id": prediction_id, "saved_at": _iso(saved_at)},
            conflict_ok=True,
        )
        return saved_at if row is not None else None

    async def is_following(self, user_id: int, prediction_id: int) -> bool:
        rows = await self._select(
            "user_predictions",
            {"select": "id", "user_id": f"eq.{user_id}", "prediction_id": f"eq.{prediction_id}", "limit": "1"},
        )
        return bool(rows)

    async def list_followed(self, user_id: int, status: str | None = None) -> list[FollowedPrediction]:
        params = {
            "select": "saved_at,predictions!inner(*)",
            "user_id": f"eq.{user_id}",
            "order": "saved_at.desc,id.desc",
        }
        if status is not None:
            params["predictions.status"] = f"eq.{status}"
        rows = await self._select("user_predictions", params)
        return [FollowedPrediction.model_validate({**r["predictions"], "saved_at": r["saved_at"]}) for r in rows]

    async def list_follower_ids(self, prediction_id: int) -> list[int]:
        rows = await self._select(
            "user_predictions",
            {"select": "user_id", "prediction_id": f"eq.{prediction_id}", "order": "id.asc"},
        )
        return [r["user_id"] for r in rows]

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def create_notification(self, user_id: int, message: str, type_: str) -> NotificationRecord:
        row = await self._insert(
            "notifications",
            {"user_id": user_id, "message": message, "type": type_, "read": False, "created_at": _iso(_now())},
        )
        return NotificationRecord.model_validate(row)

    async def list_notifications(self, user_id: int) -> list[NotificationRecord]:
        rows = await self._select(
            "notifications",
            {"select": "*", "user_id": f"eq.{user_id}", "order": "created_at.desc,id.desc"},
        )
        return [NotificationRecord.model_validate(r) for r in rows]

    async def mark_notification_read(self, notification_id: int, user_id: int) -> bool:
        rows = await self._update(
            "notifications",
            {"id": f"eq.{notification_id}", "user_id": f"eq.{user_id}"},
            {"read": True},
            select="id",
        )
        return bool(rows)

    async def mark_all_notifications_read(self, user_id: int) -> int:
        rows = await self._update(
            "notifications",
            {"user_id": f"eq.{user_id}", "read": "is.false"},
            {"read": True},
            select="id",
        )
        return len(rows)

    async def count_unread(self, user_id: int) -> int:
        response = await self._request(
            "HEAD",
            "/notifications",
            params={"select": "id", "user_id": f"eq.{user_id}", "read": "is.false"},
            headers={"Prefer": "count=exact"},
        )
        return self._content_range_total(response)
