"""Leave application endpoints: apply, list, decide, delete."""

import logging
from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from leave_tracker.api.v1.dependencies import ephemeral_note, get_leave_repository
from leave_tracker.constants.constants import LeaveDuration, RequestStatus
from leave_tracker.core.exceptions import NotFoundError, ValidationError
from leave_tracker.models.identifiers import same_id
from leave_tracker.schemas.leaveSchema import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    FanOutResponse,
    GroupedSubmission,
    LeaveBatchStatusUpdateRequest,
    LeaveCreateRequest,
    LeaveCreatedResponse,
    LeaveDeleteRequest,
    LeaveResponse,
    LeaveStatusUpdateRequest,
)
from leave_tracker.services.LeaveRepository import LeaveRepository
from leave_tracker.utils.leaves.detect_conflicts import detect_conflicts
from leave_tracker.utils.leaves.group_submissions import (
    fan_out_status_update,
    group_submissions,
    parse_decision,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["leaves"])


def _require_id(raw: Any) -> str:
    if raw is None or not str(raw).strip():
        raise ValidationError("Leave ID is required")
    return str(raw).strip()


def _clean_dates(raw: Any) -> List[str]:
    """Distinct ISO dates in ascending order; rejects anything else."""
    if not isinstance(raw, list) or not raw:
        raise ValidationError("Missing required fields")
    cleaned = set()
    for value in raw:
        try:
            cleaned.add(date.fromisoformat(str(value).strip()).isoformat())
        except ValueError:
            raise ValidationError(f"Invalid date: {value}. Use YYYY-MM-DD")
    return sorted(cleaned)


def _require_half_day_period(leave_duration, half_day_period):
    if leave_duration == LeaveDuration.half_day and half_day_period is None:
        raise ValidationError("Half-day leave requires half_day_period (morning or evening)")


# -----------------------------
# List / Apply
# -----------------------------
@router.get("/leaves", response_model=List[LeaveResponse])
async def list_leaves(repository: LeaveRepository = Depends(get_leave_repository)):
    """
    All leaves, newest first, with the employee name resolved
    """
    return await repository.get_all_leaves()


@router.post("/leaves", status_code=201, response_model=LeaveCreatedResponse, response_model_exclude_none=True)
async def apply_for_leave(
    payload: LeaveCreateRequest,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    """
    Apply for leave on one or more dates
    """
    if payload.user_id is None or not str(payload.user_id).strip():
        raise ValidationError("Missing required fields")
    dates = _clean_dates(payload.dates)
    _require_half_day_period(payload.leave_duration, payload.half_day_period)

    data = payload.model_dump()
    data["user_id"] = str(payload.user_id).strip()
    data["dates"] = dates
    leave = await repository.create_leave(data)
    return LeaveCreatedResponse(id=leave.id, **ephemeral_note(repository.store))


# -----------------------------
# Grouped submissions / Conflicts
# -----------------------------
@router.get("/leaves/grouped", response_model=List[GroupedSubmission])
async def list_grouped_submissions(
    request: Request,
    status: Optional[RequestStatus] = None,
    user_id: Optional[str] = None,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    """
    Leaves coalesced into the submissions that created them
    """
    leaves = await repository.get_all_leaves()
    if status is not None:
        leaves = [l for l in leaves if l.status == status]
    if user_id:
        leaves = [l for l in leaves if same_id(l.user_id, user_id)]
    return group_submissions(leaves, request.app.state.settings.SUBMISSION_GROUP_WINDOW_SECONDS)


@router.post("/leaves/conflicts", response_model=ConflictCheckResponse)
async def check_conflicts(
    payload: ConflictCheckRequest,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    """
    Other employees already away on the requested dates; advisory only
    """
    _require_half_day_period(payload.leave_duration, payload.half_day_period)
    conflicts = detect_conflicts(
        payload.user_id,
        payload.dates,
        await repository.get_all_leaves(),
        leave_duration=payload.leave_duration,
        half_day_period=payload.half_day_period,
    )
    return ConflictCheckResponse(conflicts=conflicts, has_conflicts=bool(conflicts))


# -----------------------------
# Single leave
# -----------------------------
@router.get("/leaves/{leave_id}", response_model=LeaveResponse)
async def get_leave(leave_id: str, repository: LeaveRepository = Depends(get_leave_repository)):
    leave = await repository.get_leave_by_id(leave_id)
    if leave is None:
        raise NotFoundError("Leave not found")
    return leave


async def _delete(leave_id: Any, repository: LeaveRepository):
    leave = await repository.delete_leave(_require_id(leave_id))
    if leave is None:
        raise NotFoundError("Leave not found")
    return {"message": "Leave deleted successfully", "id": leave.id, **ephemeral_note(repository.store)}


@router.delete("/leaves/{leave_id}")
async def delete_leave(leave_id: str, repository: LeaveRepository = Depends(get_leave_repository)):
    return await _delete(leave_id, repository)


@router.api_route("/leaves-delete", methods=["DELETE", "POST"])
async def delete_leave_by_body(
    payload: LeaveDeleteRequest,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    return await _delete(payload.id, repository)


# -----------------------------
# Status
# -----------------------------
async def _set_status(leave_id: Any, status: Any, repository: LeaveRepository):
    leave_id = _require_id(leave_id)
    decision = parse_decision(status)
    logger.info(f"Status update request: id={leave_id} status={decision.value}")

    if await repository.get_leave_by_id(leave_id) is None:
        raise NotFoundError("Leave not found")
    # The leave can vanish between the lookup and the update.
    if await repository.update_leave_status(leave_id, decision) is None:
        raise NotFoundError("Leave not found")
    return {"message": f"Leave {decision.value} successfully", **ephemeral_note(repository.store)}


@router.api_route("/leaves-status", methods=["PATCH", "POST"])
async def update_leave_status(
    payload: LeaveStatusUpdateRequest,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    """
    Approve or reject a leave, id in the body
    """
    return await _set_status(payload.id, payload.status, repository)


@router.patch("/leaves/{leave_id}/status")
async def update_leave_status_by_path(
    leave_id: str,
    payload: LeaveStatusUpdateRequest,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    return await _set_status(leave_id, payload.status, repository)


@router.api_route("/leaves-status/batch", methods=["PATCH", "POST"], response_model=FanOutResponse)
async def update_submission_status(
    payload: LeaveBatchStatusUpdateRequest,
    repository: LeaveRepository = Depends(get_leave_repository),
):
    """
    Apply one decision to every leave of a grouped submission.
    Answers 207 when only some of the leaves were updated.
    """
    outcome = await fan_out_status_update(repository, payload.ids, payload.status)
    body = FanOutResponse(
        status=outcome.status,
        results=outcome.results,
        all_succeeded=outcome.all_succeeded,
        refetch_required=outcome.refetch_required,
    )
    if not outcome.all_succeeded:
        return JSONResponse(status_code=207, content=body.model_dump(mode="json"))
    return body


# -----------------------------
# Clear
# -----------------------------
@router.api_route("/clear-leaves", methods=["DELETE", "POST"])
async def clear_leaves(repository: LeaveRepository = Depends(get_leave_repository)):
    """
    Delete every leave; employees are kept
    """
    result = await repository.clear_leaves()
    body = {"message": "All leaves data cleared successfully", "deletedCount": result["deleted_count"]}
    if result["ephemeral"]:
        body["message"] = "All leaves data cleared successfully (in-memory)"
        body.update(ephemeral_note(repository.store))
    return body
