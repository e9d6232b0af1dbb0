"""
Prediction business logic: creation, listings, follows, resolution and ROI.

Every read goes back to the store; nothing here caches state.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import Any

import structlog

from vertex.errors import AlreadyFollowingError, ConflictError, NotFoundError, ValidationError
from vertex.predictions.schemas import RoiSummary
from vertex.store import TipStore
from vertex.store.records import (
    STATUSES,
    FollowedPrediction,
    PredictionRecord,
    PredictionView,
)

logger = structlog.get_logger()

LATEST_LIMIT = 10

_DECIMAL = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------


def parse_odds(value: Any) -> float:
    """
    Decimal odds as a finite number greater than zero.

    Accepts a JSON number or a plain decimal string (``"1.8"``, ``"2"``,
    ``"1.5e0"``). Booleans, underscores, ``nan``/``inf`` spellings and
    anything else are rejected.
    """
    msg = "Odds must be a valid number"
    if isinstance(value, bool):
        raise ValidationError(msg)
    if isinstance(value, str) and _DECIMAL.fullmatch(value.strip()):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        raise ValidationError(msg)
    try:
        odds = float(value)
    except OverflowError:
        raise ValidationError(msg) from None
    if not math.isfinite(odds) or odds <= 0:
        raise ValidationError(msg)
    return odds


def parse_event_date(value: Any) -> datetime:
    """ISO-8601 date or date-time. Naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            msg = "Date must be a valid date format"
            raise ValidationError(msg) from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # e.g. 0001-01-01T00:00:00+05:00 falls before datetime.min in UTC
        msg = "Date must be a valid date format"
        raise ValidationError(msg) from None


def summarize_roi(followed: Iterable[PredictionRecord]) -> RoiSummary:
    """
    Flat one-unit stake on every followed tip.

    A win returns ``odds - 1``, a loss costs 1, pending tips count for nothing.
    ``roi_percentage`` is the return per followed tip, 0 when nothing is followed.
    """
    won = lost = pending = 0
    roi = 0.0
    for prediction in followed:
        if prediction.status == "won":
            won += 1
            roi += prediction.odds - 1
        elif prediction.status == "lost":
            lost += 1
            roi -= 1
        else:
            pending += 1

    total = won + lost + pending
    return RoiSummary(
        total_followed=total,
        total_won=won,
        total_lost=lost,
        total_pending=pending,
        roi=roi,
        roi_percentage=(roi / total) * 100 if total > 0 else 0.0,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class PredictionService:
    """CRUD, follow and status operations over predictions."""

    def __init__(self, store: TipStore) -> None:
        self.store = store

    async def create(
        self,
        *,
        match: str | None,
        sport: str | None,
        odds: Any,
        date: Any,
        tipster: str | None,
        created_by: int | None,
    ) -> PredictionRecord:
        """
        Validate and insert a pending prediction.

        Raises:
            ValidationError: If a field is missing, the odds are not a number
                or the date cannot be parsed. Nothing is written in that case.
        """
        values = (match, sport, odds, date, tipster)
        if any(v is None or (isinstance(v, str) and not v.strip()) for v in values):
            msg = "All fields are required: match, sport, odds, date, tipster"
            raise ValidationError(msg)

        parsed_odds = parse_odds(odds)
        event_date = parse_event_date(date)

        prediction = await self.store.create_prediction(
            match_name=match.strip(),
            sport=sport.strip(),
            odds=parsed_odds,
            event_date=event_date,
            tipster_name=tipster.strip(),
            created_by=created_by,
        )
        logger.info("prediction_created", prediction_id=prediction.id, created_by=created_by)
        return prediction

    async def list_upcoming(self, user_id: int | None = None) -> list[PredictionView]:
        """Future events only, soonest first."""
        return await self.store.list_upcoming(user_id, datetime.now(timezone.utc))

    async def list_all(self, user_id: int) -> list[PredictionView]:
        """Every prediction, soonest first, flagged with the caller's follow state."""
        return await self.store.list_with_follow_state(user_id)

    async def list_recent(self, limit: int | None = LATEST_LIMIT) -> list[PredictionRecord]:
        """Newest first; the admin management view passes ``limit=None``."""
        return await self.store.list_recent(limit)

    async def get(self, prediction_id: int) -> PredictionRecord:
        prediction = await self.store.get_prediction(prediction_id)
        if prediction is None:
            msg = "Prediction not found"
            raise NotFoundError(msg)
        return prediction

    async def set_status(self, prediction_id: int, status: str | None) -> PredictionRecord:
        """
        Resolve a prediction.

        pending -> won/lost is the only real transition. pending -> pending is
        accepted as a no-op. Once won or lost, the status is frozen.

        Raises:
            ValidationError: Unknown status value.
            NotFoundError: No prediction with that id.
            ConflictError: The prediction is already won or lost.
        """
        if status not in STATUSES:
            msg = "Status must be one of: pending, won, lost"
            raise ValidationError(msg)

        current = await self.get(prediction_id)
        if current.is_terminal:
            msg = f"Prediction already resolved as {current.status}"
            raise ConflictError(msg)
        if status == "pending":
            return current

        updated = await self.store.resolve_prediction(prediction_id, status)
        if updated is None:
            # Lost a race with another resolution, or deleted underneath us.
            current = await self.get(prediction_id)
            msg = f"Prediction already resolved as {current.status}"
            raise ConflictError(msg)

        logger.info("prediction_resolved", prediction_id=prediction_id, status=status)
        return updated

    async def follow(self, user_id: int, prediction_id: int | None) -> PredictionRecord:
        """
        Follow a prediction. Returns the followed prediction.

        Raises:
            ValidationError: No prediction id supplied.
            NotFoundError: Unknown prediction.
            AlreadyFollowingError: The pair already exists, including when a
                concurrent request inserted it between our check and insert.
        """
        if prediction_id is None:
            msg = "Prediction ID is required"
            raise ValidationError(msg)

        prediction = await self.get(prediction_id)
        if await self.store.is_following(user_id, prediction_id):
            raise AlreadyFollowingError

        if await self.store.add_follow(user_id, prediction_id) is None:
            raise AlreadyFollowingError

        logger.info("prediction_followed", user_id=user_id, prediction_id=prediction_id)
        return prediction

    async def list_followed(self, user_id: int, status: str | None = None) -> list[FollowedPrediction]:
        """Followed predictions, most recent follow first. ``all`` means no filter."""
        if status in (None, "", "all"):
            return await self.store.list_followed(user_id)
        if status not in STATUSES:
            msg = "Status must be one of: all, pending, won, lost"
            raise ValidationError(msg)
        return await self.store.list_followed(user_id, status)

    async def compute_roi(self, user_id: int) -> RoiSummary:
        return summarize_roi(await self.store.list_followed(user_id))
