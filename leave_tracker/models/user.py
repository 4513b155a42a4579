"""User document for the leave tracker."""

from enum import Enum
from typing import Any, Dict, Optional

from leave_tracker.constants.constants import UserRole
from leave_tracker.models.base import TimestampMixin
from leave_tracker.models.identifiers import normalize_id


class AccountState(str, Enum):
    """Password-login state of an employee account."""

    needs_setup = "needs_setup"
    active = "active"


class UserDocument(TimestampMixin):
    """Thin view over a raw ``users`` document."""

    def __init__(self, raw: Dict[str, Any]):
        self.raw = raw

    @property
    def id(self) -> str:
        return normalize_id(self.raw.get("_id"))

    @property
    def name(self) -> str:
        return self.raw.get("name") or ""

    @property
    def role(self) -> str:
        role = self.raw.get("role")
        return role.value if isinstance(role, UserRole) else (role or UserRole.employee.value)

    @property
    def paysheet_number(self) -> Optional[str]:
        return self.raw.get("paysheet_number")

    @property
    def email(self) -> Optional[str]:
        return self.raw.get("email")

    @property
    def password_hash(self) -> Optional[str]:
        return self.raw.get("password")

    @property
    def state(self) -> AccountState:
        # Only an explicit False together with a stored password is active.
        if self.raw.get("first_login") is False and self.password_hash:
            return AccountState.active
        return AccountState.needs_setup

    @property
    def needs_setup(self) -> bool:
        return self.state is AccountState.needs_setup

    def public_view(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "paysheet_number": self.paysheet_number,
            "email": self.email,
        }

    def token_claims(self) -> Dict[str, Any]:
        return self.public_view()


def new_user_document(
    name: str,
    role: UserRole = UserRole.employee,
    paysheet_number: Optional[str] = None,
    email: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a ``users`` document that still requires first-login setup."""
    document = {
        "name": name,
        "role": role.value,
        "first_login": True,
        "password": None,
    }
    if paysheet_number is not None:
        document["paysheet_number"] = str(paysheet_number).strip()
    if email is not None:
        document["email"] = email.strip().lower()
    return UserDocument.stamp_new(document)
