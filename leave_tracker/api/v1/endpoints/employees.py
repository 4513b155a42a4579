from typing import List

from fastapi import APIRouter, Depends

from leave_tracker.api.v1.dependencies import get_leave_repository
from leave_tracker.schemas.usersSchema import EmployeeOptionResponse
from leave_tracker.services.LeaveRepository import LeaveRepository

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=List[EmployeeOptionResponse])
async def list_employees(repository: LeaveRepository = Depends(get_leave_repository)):
    """
    All employees for the selection dropdown
    """
    return await repository.list_employees_for_selection()
