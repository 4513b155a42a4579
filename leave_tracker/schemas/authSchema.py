from typing import Optional
from pydantic import BaseModel

from leave_tracker.schemas.usersSchema import PublicUserResponse


class VerifyRequest(BaseModel):
    paysheet_number: Optional[str] = None
    email: Optional[str] = None


class FirstLoginRequest(BaseModel):
    paysheet_number: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class CheckRequest(BaseModel):
    paysheet_number: Optional[str] = None


class VerifyResponse(BaseModel):
    verified: bool = True
    name: str
    paysheet_number: Optional[str] = None


class CheckResponse(BaseModel):
    exists: bool = True
    first_login: bool
    name: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: PublicUserResponse
