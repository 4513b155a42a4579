import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from leave_tracker.api.v1.dependencies import get_auth_service
from leave_tracker.core.config import settings
from leave_tracker.core.ratelimit import limiter
from leave_tracker.core.security import get_session_claims
from leave_tracker.schemas.authSchema import (
    AuthResponse,
    CheckRequest,
    CheckResponse,
    FirstLoginRequest,
    LoginRequest,
    VerifyRequest,
    VerifyResponse,
)
from leave_tracker.schemas.leaveSchema import LeaveResponse
from leave_tracker.schemas.usersSchema import PublicUserResponse
from leave_tracker.services.AuthenticationService import AuthenticationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


# -----------------------------
# First Login
# -----------------------------
@router.post("/verify", response_model=VerifyResponse)
async def verify_employee(
    payload: VerifyRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    """
    Check that paysheet number and email match an account awaiting setup
    """
    return await service.verify(payload.paysheet_number, payload.email)


@router.post("/first-login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def first_login(
    request: Request,
    payload: FirstLoginRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    """
    Set the initial password and return a session token
    """
    return await service.complete_first_login(payload.paysheet_number, payload.email, payload.password)


@router.post("/check", response_model=CheckResponse)
async def check_first_login(
    payload: CheckRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    return await service.check(payload.paysheet_number)


# -----------------------------
# Login
# -----------------------------
@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    return await service.login(payload.email, payload.password)


# -----------------------------
# Current User
# -----------------------------
@router.get("/me", response_model=PublicUserResponse)
async def get_current_user(
    claims: dict = Depends(get_session_claims),
    service: AuthenticationService = Depends(get_auth_service),
):
    """
    Return current authenticated user info
    """
    return await service.current_user(claims)


@router.get("/my-leaves", response_model=List[LeaveResponse])
async def get_my_leaves(
    claims: dict = Depends(get_session_claims),
    service: AuthenticationService = Depends(get_auth_service),
):
    """
    Return the authenticated employee's own leaves, newest first
    """
    return await service.my_leaves(claims)
