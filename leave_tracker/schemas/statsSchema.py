from pydantic import BaseModel, Field


class LeaveTypeBreakdown(BaseModel):
    casual: int = 0
    medical: int = 0
    halfday: int = 0
    short: int = 0


class StatsOverviewResponse(BaseModel):
    totalEmployees: int = 0
    totalLeaves: int = 0
    pendingLeaves: int = 0
    approvedLeaves: int = 0
    rejectedLeaves: int = 0
    leaveTypeBreakdown: LeaveTypeBreakdown = Field(default_factory=LeaveTypeBreakdown)


class EmployeeStatsResponse(BaseModel):
    id: str
    name: str
    total_leaves: int = 0
    approved_leaves: int = 0
    pending_leaves: int = 0
    casual_leaves: int = 0
    medical_leaves: int = 0
    halfday_leaves: int = 0
    short_leaves: int = 0
