from typing import List

from fastapi import APIRouter, Depends

from leave_tracker.api.v1.dependencies import get_leave_repository
from leave_tracker.schemas.statsSchema import EmployeeStatsResponse, StatsOverviewResponse
from leave_tracker.services.LeaveRepository import LeaveRepository

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/overview", response_model=StatsOverviewResponse)
async def get_stats_overview(repository: LeaveRepository = Depends(get_leave_repository)):
    return await repository.get_stats()


@router.get("/employees", response_model=List[EmployeeStatsResponse])
async def get_employee_stats(repository: LeaveRepository = Depends(get_leave_repository)):
    return await repository.get_employee_stats()
