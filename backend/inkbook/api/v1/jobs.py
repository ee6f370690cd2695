"""Scheduled sweep endpoints.

Called by an external scheduler (cron, Cloud Scheduler, a k8s CronJob).
When ``CRON_SECRET`` is set the caller must send it in ``X-Cron-Secret``.
A failed sweep answers 500 with the same body shape as a successful one.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inkbook.api.deps import get_clock, get_session_factory, verify_cron_secret
from inkbook.core.clock import Clock
from inkbook.schemas.jobs import SweepResult
from inkbook.services.sweep_service import process_bookings

router = APIRouter(
    prefix="/api/v1/jobs",
    tags=["jobs"],
    dependencies=[Depends(verify_cron_secret)],
)


async def _run(
    response: Response,
    session_factory: async_sessionmaker[AsyncSession],
    clock: Clock,
    jobs: tuple[str, ...],
) -> dict:
    result = await process_bookings(session_factory, clock, jobs)
    if not result["success"]:
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return result


@router.post("/process-bookings", response_model=SweepResult, response_model_exclude_none=True)
async def run_process_bookings(
    response: Response,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Complete past appointments, then expire stale requests."""
    return await _run(response, session_factory, clock, ("completed", "expired"))


@router.post("/expire-requests", response_model=SweepResult, response_model_exclude_none=True)
async def run_expire_requests(
    response: Response,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Expire pending requests older than the expiry window."""
    return await _run(response, session_factory, clock, ("expired",))


@router.post("/complete-appointments", response_model=SweepResult, response_model_exclude_none=True)
async def run_complete_appointments(
    response: Response,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Mark appointments dated before today as completed."""
    return await _run(response, session_factory, clock, ("completed",))
