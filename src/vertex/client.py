"""
Async client for the Vertex API.

Keeps the bearer token in memory after ``login``; ``logout`` only forgets it
(the server has no revocation, the token stays valid until it expires).
Transient transport failures are retried a bounded number of times with
exponential backoff. HTTP error responses are never retried.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_TIMEOUT = 10.0
DEFAULT_RETRIES = 3


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class VertexClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        backoff: float = 0.5,
        max_backoff: float = 5.0,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if retries < 1:
            msg = "retries must be at least 1"
            raise ValueError(msg)
        self.retries = retries
        self.backoff = backoff
        self.max_backoff = max_backoff
        self.token = token
        self.user: dict[str, Any] | None = None
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    async def __aenter__(self) -> VertexClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body."""
        headers = {"Content-Type": "application/json", **kwargs.pop("headers", {})}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        delay = self.backoff
        for attempt in range(1, self.retries + 1):
            try:
                response = await self._http.request(method, path, headers=headers, **kwargs)
                break
            except httpx.TransportError as e:
                if attempt == self.retries:
                    raise
                logger.warning(
                    "api_request_retry",
                    method=method,
                    path=path,
                    attempt=attempt,
                    error=str(e),
                    retry_in=delay,
                )
                await asyncio.sleep(delay)
                delay = min(delay * 2, self.max_backoff)

        if response.is_error:
            raise ApiError(response.status_code, self._detail(response))
        return response.json()

    @staticmethod
    def _detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"Error: {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("error") or body.get("message") or body)
        return str(body)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self.request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        self.user = data["user"]
        return data

    def logout(self) -> None:
        self.token = None
        self.user = None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.get("role") == "admin")

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    async def list_predictions(self, user_id: int | None = None) -> list[dict[str, Any]]:
        params = {"userId": user_id} if user_id is not None else None
        return await self.request("GET", "/api/predictions", params=params)

    async def list_all_predictions(self) -> list[dict[str, Any]]:
        data = await self.request("GET", "/api/predictions/all")
        return data["predictions"]

    async def follow(self, prediction_id: int) -> dict[str, Any]:
        return await self.request("POST", "/api/predictions/follow", json={"predictionId": prediction_id})

    async def followed(self, status: str | None = None) -> list[dict[str, Any]]:
        params = {"status": status} if status else None
        data = await self.request("GET", "/api/predictions/followed", params=params)
        return data["predictions"]

    async def create_prediction(
        self, *, match: str, sport: str, odds: float | str, date: str, tipster: str
    ) -> dict[str, Any]:
        data = await self.request(
            "POST",
            "/api/predictions/create",
            json={"match": match, "sport": sport, "odds": odds, "date": date, "tipster": tipster},
        )
        return data["prediction"]

    async def set_status(self, prediction_id: int, status: str) -> dict[str, Any]:
        data = await self.request("PATCH", f"/api/predictions/{prediction_id}/status", json={"status": status})
        return data["prediction"]

    async def roi(self) -> dict[str, Any]:
        return await self.request("GET", "/api/user/roi")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def notifications(self) -> list[dict[str, Any]]:
        return await self.request("GET", "/api/notifications")

    async def mark_notification_read(self, notification_id: int) -> dict[str, Any]:
        return await self.request("PATCH", f"/api/notifications/{notification_id}/read")
