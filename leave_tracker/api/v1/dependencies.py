from fastapi import Depends, Request

from leave_tracker.constants.constants import EPHEMERAL_NOTE
from leave_tracker.core.database import DocumentStoreManager, aget_store
from leave_tracker.services.AuthenticationService import AuthenticationService
from leave_tracker.services.LeaveRepository import LeaveRepository


async def get_leave_repository(store: DocumentStoreManager = Depends(aget_store)) -> LeaveRepository:
    return LeaveRepository(store)


async def get_auth_service(
    request: Request,
    repository: LeaveRepository = Depends(get_leave_repository),
) -> AuthenticationService:
    return AuthenticationService(repository, request.app.state.settings)


def ephemeral_note(store: DocumentStoreManager) -> dict:
    """Response annotation telling callers that writes will not survive a restart."""
    return {"note": EPHEMERAL_NOTE} if store.is_ephemeral else {}
