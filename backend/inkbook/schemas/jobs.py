"""Response schema for the scheduled sweep endpoints."""

from datetime import datetime

from pydantic import BaseModel


class SweepResult(BaseModel):
    """Outcome of one sweep run.

    On success ``message`` and the counts are set. On failure ``error``
    holds the first job error; the job that did run still reports its count.
    """

    success: bool
    expired_count: int | None = None
    completed_count: int | None = None
    total_processed: int | None = None
    message: str | None = None
    error: str | None = None
    timestamp: datetime
