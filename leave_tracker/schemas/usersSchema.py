from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from leave_tracker.constants.constants import UserRole


class EmployeeResponse(BaseModel):
    id: str
    name: str
    role: UserRole
    created_at: Optional[datetime] = None


class EmployeeOptionResponse(BaseModel):
    """Projection used by the employee selection dropdown."""
    id: str
    name: str
    paysheet_number: Optional[str] = None


class PublicUserResponse(BaseModel):
    id: str
    name: str
    paysheet_number: Optional[str] = None
    email: Optional[str] = None
