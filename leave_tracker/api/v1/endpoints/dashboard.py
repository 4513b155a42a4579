"""Dashboard router - view models for the admin and employee screens."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Request

from leave_tracker.api.v1.dependencies import get_leave_repository
from leave_tracker.constants.constants import BLOCKING_STATUSES, RequestStatus
from leave_tracker.core.security import get_session_claims
from leave_tracker.services.LeaveRepository import LeaveRepository
from leave_tracker.utils.leaves.group_submissions import group_submissions

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"]
)


async def _leaves_or_empty(loader, description: str):
    # List widgets render empty rather than failing the whole dashboard.
    try:
        return await loader()
    except Exception as e:
        logger.exception(f"Error loading {description}: {e}")
        return []


@router.get("/admin")
async def get_admin_dashboard(
    request: Request,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    window = request.app.state.settings.SUBMISSION_GROUP_WINDOW_SECONDS
    leaves = await _leaves_or_empty(repository.get_all_leaves, "leaves")
    pending = [l for l in leaves if l.status == RequestStatus.pending]

    return {
        "stats": await repository.get_stats(),
        "employees": await repository.get_employee_stats(),
        "pending_submissions": group_submissions(pending, window),
        "leaves": leaves,
        "ephemeral": repository.store.is_ephemeral,
    }


@router.get("/employee")
async def get_employee_dashboard(
    request: Request,
    claims: dict = Depends(get_session_claims),
    repository: LeaveRepository = Depends(get_leave_repository),
):
    window = request.app.state.settings.SUBMISSION_GROUP_WINDOW_SECONDS
    today = date.today().isoformat()

    all_leaves = await _leaves_or_empty(repository.get_all_leaves, "leaves")
    mine = [l for l in all_leaves if l.user_id == str(claims["id"])]
    away_today = [
        l for l in all_leaves
        if today in l.dates and l.status in BLOCKING_STATUSES
    ]

    return {
        "user": {"id": claims["id"], "name": claims.get("name")},
        "submissions": group_submissions(mine, window),
        "today": today,
        "away_today": away_today,
    }
