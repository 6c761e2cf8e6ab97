"""
Analytics result models.

Dependencies: pydantic
System role: Aggregate statistics contracts
"""

from datetime import datetime

from pydantic import BaseModel, Field


class SessionStats(BaseModel):
    """Per-session message statistics."""

    message_count: int = 0
    total_tokens: int = 0
    avg_response_time: float = 0.0
    last_active_at: datetime


class CategoryCount(BaseModel):
    """Inquiry category with its message count."""

    category: str
    count: int


class StoreDailyStats(BaseModel):
    """Per-store statistics for one calendar day."""

    session_count: int = 0
    message_count: int = 0
    total_tokens: int = 0
    avg_response_time: float = 0.0
    top_categories: list[CategoryCount] = Field(default_factory=list)


class ResponseTimePercentiles(BaseModel):
    """Continuous response time percentiles in milliseconds."""

    p50: float = 0.0
    p95: float = 0.0
    p99: float = 0.0


class TokenUsageStats(BaseModel):
    """Token usage over a window."""

    avg: float = 0.0
    total: int = 0


class PerformanceMetrics(BaseModel):
    """Latency, token and error statistics over a trailing window."""

    avg_response_time: float = 0.0
    percentiles: ResponseTimePercentiles = Field(default_factory=ResponseTimePercentiles)
    token_usage_stats: TokenUsageStats = Field(default_factory=TokenUsageStats)
    error_rate: float = 0.0
