"""Employee authentication: first-login setup, password login and sessions.

An account is in one of two states. ``needs_setup`` accounts prove who they
are with paysheet number + email and choose a password; that single update is
the only way to become ``active``. ``active`` accounts log in with email +
password and receive a signed session token.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from leave_tracker.constants.constants import USERS_COLLECTION, UserRole
from leave_tracker.core.config import Settings
from leave_tracker.core.exceptions import (
    AlreadySetupError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    SetupRequiredError,
    UnauthorizedError,
    ValidationError,
)
from leave_tracker.core.security import (
    create_jwt_token,
    decode_jwt_token,
    hash_password,
    verify_password,
)
from leave_tracker.models.user import UserDocument
from leave_tracker.schemas.authSchema import AuthResponse, CheckResponse, VerifyResponse
from leave_tracker.schemas.leaveSchema import LeaveResponse
from leave_tracker.schemas.usersSchema import PublicUserResponse
from leave_tracker.services.LeaveRepository import LeaveRepository

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


class AuthenticationService:

    def __init__(self, repository: LeaveRepository, settings: Settings):
        self.repository = repository
        self.store = repository.store
        self.settings = settings

    async def _users(self):
        return await self.store.collection(USERS_COLLECTION)

    async def _find_employee(self, **fields) -> Optional[UserDocument]:
        users = await self._users()
        raw = await users.find_one({**fields, "role": UserRole.employee.value})
        return UserDocument(raw) if raw else None

    async def _find_for_setup(self, paysheet_number: Optional[str], email: Optional[str]) -> UserDocument:
        paysheet_number, email = _clean(paysheet_number), _clean(email).lower()
        if not paysheet_number or not email:
            raise ValidationError("Paysheet number and email are required")

        user = await self._find_employee(paysheet_number=paysheet_number, email=email)
        if user is None:
            raise NotFoundError("Email and paysheet number do not match. Please check your details.")
        if not user.needs_setup:
            raise AlreadySetupError("Account already set up. Please use regular login.")
        return user

    def _issue(self, user: UserDocument, message: str) -> AuthResponse:
        token = create_jwt_token(
            user.token_claims(),
            expires_delta=timedelta(days=self.settings.ACCESS_TOKEN_EXPIRE_DAYS),
            secret_key=self.settings.SECRET_KEY,
            algorithm=self.settings.ALGORITHM,
        )
        return AuthResponse(message=message, token=token, user=PublicUserResponse(**user.public_view()))

    async def verify(self, paysheet_number: Optional[str], email: Optional[str]) -> VerifyResponse:
        """Check that paysheet number and email identify an account awaiting setup."""
        user = await self._find_for_setup(paysheet_number, email)
        return VerifyResponse(name=user.name, paysheet_number=user.paysheet_number)

    async def check(self, paysheet_number: Optional[str]) -> CheckResponse:
        """Report whether the employee with ``paysheet_number`` still needs setup."""
        paysheet_number = _clean(paysheet_number)
        if not paysheet_number:
            raise ValidationError("Paysheet number is required")
        user = await self._find_employee(paysheet_number=paysheet_number)
        if user is None:
            raise NotFoundError("Employee not found")
        return CheckResponse(first_login=user.needs_setup, name=user.name)

    async def complete_first_login(
        self,
        paysheet_number: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResponse:
        """Set the initial password and activate the account."""
        if not _clean(paysheet_number) or not _clean(email) or not password:
            raise ValidationError("Paysheet number, email, and password are required")
        if len(password) < self.settings.MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {self.settings.MIN_PASSWORD_LENGTH} characters")

        user = await self._find_for_setup(paysheet_number, email)

        users = await self._users()
        changes = UserDocument.stamp_update({
            "password": hash_password(password),
            "first_login": False,
        })
        await users.update_one({"_id": user.raw["_id"]}, changes)
        user.raw.update(changes)
        logger.info(f"Account setup completed for user {user.id}")
        return self._issue(user, "Account setup successful")

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResponse:
        email = _clean(email).lower()
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self._find_employee(email=email)
        if user is None:
            raise NotFoundError("Email not found")
        if user.needs_setup:
            raise SetupRequiredError(
                "First login required. Please set up your account with email and paysheet number."
            )
        if not verify_password(password, user.password_hash):
            logger.info(f"Invalid password for user {user.id}")
            raise InvalidCredentialsError("Invalid password")
        return self._issue(user, "Login successful")

    def verify_session(self, token: Optional[str]) -> Dict[str, Any]:
        """Claims of a valid session token."""
        if not token:
            raise UnauthorizedError("Access token required")
        claims = decode_jwt_token(token, secret_key=self.settings.SECRET_KEY, algorithm=self.settings.ALGORITHM)
        if not claims.get("id"):
            raise ForbiddenError("Invalid or expired token")
        return claims

    async def current_user(self, claims: Dict[str, Any]) -> PublicUserResponse:
        user = await self.repository.get_user_by_id(claims.get("id"))
        if user is None:
            raise NotFoundError("User not found")
        return PublicUserResponse(**user.public_view())

    async def my_leaves(self, claims: Dict[str, Any]) -> List[LeaveResponse]:
        """Leaves owned by the claimed user; the token only asserts identity."""
        return await self.repository.get_leaves_for_user(claims["id"])
