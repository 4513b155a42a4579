from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field

from leave_tracker.constants.constants import HalfDayPeriod, LeaveDuration, LeaveType, RequestStatus


class LeaveCreateRequest(BaseModel):
    """Request schema for applying for leave.

    Presence of required fields is checked by the endpoint so the error
    message can name what is missing.
    """
    user_id: Optional[Any] = None
    leave_type: Optional[LeaveType] = None
    leave_duration: Optional[LeaveDuration] = None
    half_day_period: Optional[HalfDayPeriod] = None
    dates: Optional[Any] = None
    reason: Optional[str] = None
    covering_officer: Optional[str] = None


class LeaveResponse(BaseModel):
    id: str
    user_id: str
    leave_type: LeaveType
    leave_duration: LeaveDuration = LeaveDuration.full_day
    half_day_period: Optional[HalfDayPeriod] = None
    dates: List[str]
    reason: str = ""
    covering_officer: Optional[str] = None
    status: RequestStatus
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    employee_name: Optional[str] = None


class LeaveCreatedResponse(BaseModel):
    id: str
    message: str = "Leave application submitted successfully"
    note: Optional[str] = None


class LeaveStatusUpdateRequest(BaseModel):
    """Request schema for approving or rejecting one leave."""
    id: Optional[Any] = None
    status: Optional[str] = None


class LeaveBatchStatusUpdateRequest(BaseModel):
    """Request schema for applying one decision to several leaves."""
    ids: List[Any] = Field(default_factory=list)
    status: Optional[str] = None


class LeaveDeleteRequest(BaseModel):
    id: Optional[Any] = None


class StatusUpdateResult(BaseModel):
    id: str
    ok: bool
    error: Optional[str] = None


class FanOutResponse(BaseModel):
    status: RequestStatus
    results: List[StatusUpdateResult]
    all_succeeded: bool
    refetch_required: bool


class GroupedDate(BaseModel):
    date: str
    leave_duration: LeaveDuration = LeaveDuration.full_day
    half_day_period: Optional[HalfDayPeriod] = None
    label: str = ""


class GroupedSubmission(BaseModel):
    """Several stored leaves created by one interactive submission."""
    id: str
    ids: List[str]
    user_id: str
    employee_name: Optional[str] = None
    leave_type: LeaveType
    status: RequestStatus
    reason: str = ""
    covering_officer: Optional[str] = None
    applied_at: Optional[datetime] = None
    dates: List[GroupedDate]


class ConflictCheckRequest(BaseModel):
    user_id: Optional[Any] = None
    dates: List[str] = Field(default_factory=list)
    leave_duration: LeaveDuration = LeaveDuration.full_day
    half_day_period: Optional[HalfDayPeriod] = None


class ConflictCheckResponse(BaseModel):
    conflicts: dict
    has_conflicts: bool
