"""
Chat analytics service.

Read-only aggregates over sessions and messages: per-session stats,
per-store daily stats and trailing-window performance metrics, plus
the word-based token estimator used when the model reports no usage.

Dependencies: sqlalchemy, chat_tracking.boundary.db
System role: Analytics aggregator
"""

import logging
import math
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID

from sqlalchemy import ColumnElement, Select, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_tracking.application.services.session_service import coerce_uuid
from chat_tracking.boundary.db.base import utc_now
from chat_tracking.boundary.db.connection import Database
from chat_tracking.boundary.db.models.message_model import MessageModel
from chat_tracking.boundary.db.models.session_model import SessionModel
from chat_tracking.configs.session import SessionSettings
from chat_tracking.core.exceptions import ValidationError
from chat_tracking.models.analytics import (
    CategoryCount,
    PerformanceMetrics,
    ResponseTimePercentiles,
    SessionStats,
    StoreDailyStats,
    TokenUsageStats,
)

logger = logging.getLogger(__name__)

TOKENS_PER_WORD = 1.3
TOP_CATEGORY_LIMIT = 10
PERCENTILES = (0.5, 0.95, 0.99)


def calculate_tokens(text: str | None) -> int:
    """
    Estimate token usage from whitespace-separated word count.

    Args:
        text: Message text

    Returns:
        int: ceil(words * 1.3), 0 for empty input
    """
    if not text:
        return 0
    words = text.split()
    if not words:
        return 0
    return math.ceil(len(words) * TOKENS_PER_WORD)


def percentile_cont(sorted_values: Sequence[float], fraction: float) -> float:
    """
    Continuous percentile with linear interpolation (PERCENTILE_CONT).

    Args:
        sorted_values: Ascending values
        fraction: Percentile in [0, 1]

    Returns:
        float: Interpolated value, 0.0 for an empty sequence
    """
    if not sorted_values:
        return 0.0
    position = fraction * (len(sorted_values) - 1)
    lower = math.floor(position)
    upper = min(lower + 1, len(sorted_values) - 1)
    weight = position - lower
    return float(sorted_values[lower] + (sorted_values[upper] - sorted_values[lower]) * weight)


def latency_percentile_statement(*criteria: ColumnElement[bool]) -> Select:
    """
    Server-side p50/p95/p99 of response_time_ms (PostgreSQL PERCENTILE_CONT).

    Args:
        *criteria: Window filters over messages joined to sessions

    Returns:
        Select: One row with a value per percentile, NULL over an empty window
    """
    return (
        select(
            *(
                func.percentile_cont(fraction).within_group(MessageModel.response_time_ms)
                for fraction in PERCENTILES
            )
        )
        .select_from(MessageModel)
        .join(SessionModel, MessageModel.session_id == SessionModel.id)
        .where(*criteria, MessageModel.response_time_ms.is_not(None))
    )


def _day_bounds(day: date | datetime) -> tuple[datetime, datetime]:
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(timezone.utc)
        day = day.date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class ChatAnalyticsService:
    """
    Analytics aggregator.

    Only reads; every query opens its own scoped session. Soft-deleted
    messages and sessions are excluded from every aggregate.
    """

    def __init__(self, database: Database, settings: SessionSettings | None = None) -> None:
        self.database = database
        self.settings = settings or SessionSettings()

    async def get_session_stats(self, session_id: UUID | str) -> SessionStats:
        """
        Message statistics for one session.

        Args:
            session_id: Session UUID

        Returns:
            SessionStats: Counts and averages; zero defaults with
            last_active_at=now when the session has no live messages
        """
        sid = coerce_uuid(session_id, "session_id")

        stmt = (
            select(
                func.count(MessageModel.id),
                func.coalesce(func.sum(MessageModel.token_count), 0),
                func.avg(MessageModel.response_time_ms),
                SessionModel.last_active_at,
            )
            .join(SessionModel, MessageModel.session_id == SessionModel.id)
            .where(MessageModel.session_id == sid, MessageModel.is_deleted.is_(False))
            .group_by(SessionModel.last_active_at)
        )

        async with self.database.acquire() as db:
            row = (await db.execute(stmt)).first()

        if row is None or not row[0]:
            return SessionStats(last_active_at=utc_now())

        message_count, total_tokens, avg_response_time, last_active_at = row
        return SessionStats(
            message_count=int(message_count),
            total_tokens=int(total_tokens or 0),
            avg_response_time=float(avg_response_time or 0),
            last_active_at=last_active_at,
        )

    async def get_store_daily_stats(self, store_id: str, day: date | datetime) -> StoreDailyStats:
        """
        Statistics for one store over one UTC calendar day.

        Sessions created that day (and not soft-deleted) are left-joined
        to their live messages. Top categories come from the
        inquiryCategory metadata key of the store's messages written
        that day.

        Args:
            store_id: Store identifier
            day: Calendar day (UTC)

        Returns:
            StoreDailyStats: Zero-filled when the store had no activity
        """
        if not store_id:
            raise ValidationError("store_id is required", field="store_id")
        day_start, day_end = _day_bounds(day)

        stats_stmt = (
            select(
                func.count(func.distinct(SessionModel.id)),
                func.count(MessageModel.id),
                func.coalesce(func.sum(MessageModel.token_count), 0),
                func.avg(MessageModel.response_time_ms),
            )
            .select_from(SessionModel)
            .outerjoin(
                MessageModel,
                (MessageModel.session_id == SessionModel.id) & MessageModel.is_deleted.is_(False),
            )
            .where(
                SessionModel.store_id == store_id,
                SessionModel.created_at >= day_start,
                SessionModel.created_at < day_end,
                SessionModel.deleted_at.is_(None),
            )
        )

        category = MessageModel.message_metadata["inquiryCategory"].as_string()
        categorized = (
            select(category.label("category"), MessageModel.id.label("message_id"))
            .join(SessionModel, MessageModel.session_id == SessionModel.id)
            .where(
                SessionModel.store_id == store_id,
                MessageModel.created_at >= day_start,
                MessageModel.created_at < day_end,
                MessageModel.is_deleted.is_(False),
                category.is_not(None),
            )
            .subquery()
        )
        # Grouping on the subquery column keeps the JSON path out of GROUP BY
        category_count = func.count(categorized.c.message_id).label("category_count")
        category_stmt = (
            select(categorized.c.category, category_count)
            .group_by(categorized.c.category)
            .order_by(category_count.desc(), categorized.c.category)
            .limit(TOP_CATEGORY_LIMIT)
        )

        async with self.database.acquire() as db:
            session_count, message_count, total_tokens, avg_response_time = (
                await db.execute(stats_stmt)
            ).one()
            category_rows = (await db.execute(category_stmt)).all()

        return StoreDailyStats(
            session_count=int(session_count or 0),
            message_count=int(message_count or 0),
            total_tokens=int(total_tokens or 0),
            avg_response_time=float(avg_response_time or 0),
            top_categories=[
                CategoryCount(category=row.category, count=int(row.category_count))
                for row in category_rows
            ],
        )

    async def get_performance_metrics(self, store_id: str, days: int | None = None) -> PerformanceMetrics:
        """
        Latency, token and error statistics over the trailing window.

        error_rate is the percentage of messages whose metadata carries
        an "error" key; it is 0 when the window holds no messages.

        Args:
            store_id: Store identifier
            days: Window length in days (default from settings)

        Returns:
            PerformanceMetrics: Aggregates over the window

        Raises:
            ValidationError: If days is outside [1, max_analytics_days]
        """
        if not store_id:
            raise ValidationError("store_id is required", field="store_id")
        window = self.settings.default_analytics_days if days is None else days
        if not 1 <= window <= self.settings.max_analytics_days:
            raise ValidationError(
                f"days must be between 1 and {self.settings.max_analytics_days}",
                field="days",
            )

        since = utc_now() - timedelta(days=window)
        in_window = (
            SessionModel.store_id == store_id,
            SessionModel.deleted_at.is_(None),
            MessageModel.is_deleted.is_(False),
            MessageModel.created_at >= since,
        )
        has_error = MessageModel.message_metadata["error"].as_string().is_not(None)

        totals_stmt = (
            select(
                func.count(MessageModel.id),
                func.sum(case((has_error, 1), else_=0)),
                func.avg(MessageModel.response_time_ms),
                func.avg(MessageModel.token_count),
                func.coalesce(func.sum(MessageModel.token_count), 0),
            )
            .join(SessionModel, MessageModel.session_id == SessionModel.id)
            .where(*in_window)
        )
        async with self.database.acquire() as db:
            total, errors, avg_response_time, avg_tokens, total_tokens = (
                await db.execute(totals_stmt)
            ).one()
            p50, p95, p99 = await self._latency_percentiles(db, in_window)

        total = int(total or 0)
        error_rate = (int(errors or 0) / total * 100) if total else 0.0

        logger.debug(
            "Performance metrics computed: store_id=%s days=%d messages=%d",
            store_id, window, total,
        )
        return PerformanceMetrics(
            avg_response_time=float(avg_response_time or 0),
            percentiles=ResponseTimePercentiles(
                p50=p50,
                p95=p95,
                p99=p99,
            ),
            token_usage_stats=TokenUsageStats(
                avg=float(avg_tokens or 0),
                total=int(total_tokens or 0),
            ),
            error_rate=error_rate,
        )

    def calculate_tokens(self, text: str | None) -> int:
        """Estimate tokens for text; see module-level calculate_tokens."""
        return calculate_tokens(text)

    async def _latency_percentiles(
        self,
        db: AsyncSession,
        criteria: tuple[ColumnElement[bool], ...],
    ) -> tuple[float, ...]:
        # PostgreSQL aggregates in place; other dialects interpolate the sorted latencies here
        if self.database.dialect_name == "postgresql":
            row = (await db.execute(latency_percentile_statement(*criteria))).one()
            return tuple(float(value or 0) for value in row)

        latency_stmt = (
            select(MessageModel.response_time_ms)
            .join(SessionModel, MessageModel.session_id == SessionModel.id)
            .where(*criteria, MessageModel.response_time_ms.is_not(None))
            .order_by(MessageModel.response_time_ms)
        )
        latencies = (await db.execute(latency_stmt)).scalars().all()
        return tuple(percentile_cont(latencies, fraction) for fraction in PERCENTILES)
