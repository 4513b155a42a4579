"""Data-access layer for employees and leave applications.

Built on the document store manager, so every operation works the same
against MongoDB and against the in-memory fallback. Aggregate reads never
raise; single-entity reads return ``None`` for absence and let backend
failures propagate.
"""

import logging
from typing import Any, Dict, List, Optional

from leave_tracker.constants.constants import (
    LEAVES_COLLECTION,
    USERS_COLLECTION,
    LeaveType,
    RequestStatus,
    UserRole,
)
from leave_tracker.core.database import DocumentStoreManager, default_employee_documents
from leave_tracker.models.identifiers import normalize_id, same_id
from leave_tracker.models.leave import LeaveDocument
from leave_tracker.models.user import UserDocument
from leave_tracker.schemas.leaveSchema import LeaveResponse, StatusUpdateResult
from leave_tracker.schemas.statsSchema import (
    EmployeeStatsResponse,
    LeaveTypeBreakdown,
    StatsOverviewResponse,
)
from leave_tracker.schemas.usersSchema import EmployeeOptionResponse, EmployeeResponse

logger = logging.getLogger(__name__)

UNKNOWN_EMPLOYEE = "Unknown"


class LeaveRepository:
    """Leave and employee operations used by the API layer."""

    def __init__(self, store: DocumentStoreManager):
        self.store = store

    async def _users(self):
        return await self.store.collection(USERS_COLLECTION)

    async def _leaves(self):
        return await self.store.collection(LEAVES_COLLECTION)

    async def _query_id(self, raw: Any) -> Optional[Any]:
        await self.store.init()
        try:
            return self.store.query_id(raw)
        except ValueError:
            return None

    # ------------------------------
    # Employees
    # ------------------------------
    async def _ensure_default_employees(self):
        """Seed the default employees into an empty live ``users`` collection.

        Guarded by a count, not a transaction: two concurrent cold starts
        may both insert.
        """
        if not self.store.native_ids or not self.store.settings.SEED_DEFAULT_EMPLOYEES:
            return
        users = await self._users()
        if await users.count_documents({}) == 0:
            await users.insert_many(default_employee_documents())
            logger.info("Default employees initialized")

    async def _employee_documents(self) -> List[UserDocument]:
        try:
            await self._ensure_default_employees()
        except Exception as e:
            logger.error(f"Error initializing default employees: {e}")
        users = await self._users()
        return [UserDocument(u) for u in await users.find({"role": UserRole.employee.value})]

    async def get_employees(self) -> List[EmployeeResponse]:
        return [
            EmployeeResponse(id=u.id, name=u.name, role=u.role, created_at=u.raw.get("created_at"))
            for u in await self._employee_documents()
        ]

    async def list_employees_for_selection(self) -> List[EmployeeOptionResponse]:
        return [
            EmployeeOptionResponse(id=u.id, name=u.name, paysheet_number=u.paysheet_number)
            for u in await self._employee_documents()
        ]

    async def get_user_by_id(self, user_id: Any) -> Optional[UserDocument]:
        query_id = await self._query_id(user_id)
        if query_id is None:
            return None
        users = await self._users()
        raw = await users.find_one({"_id": query_id})
        return UserDocument(raw) if raw else None

    async def _names_by_id(self) -> Dict[str, str]:
        users = await self._users()
        return {normalize_id(u.get("_id")): u.get("name") or "" for u in await users.find({})}

    # ------------------------------
    # Leaves
    # ------------------------------
    def _to_response(self, raw: Dict[str, Any], names: Optional[Dict[str, str]] = None) -> LeaveResponse:
        employee_name = None
        if names is not None:
            employee_name = names.get(normalize_id(raw.get("user_id")), UNKNOWN_EMPLOYEE)
        return LeaveResponse(**LeaveDocument.to_api(raw, employee_name))

    async def get_all_leaves(self) -> List[LeaveResponse]:
        """All leaves, newest first, joined with the owner's name."""
        leaves = await self._leaves()
        documents = await leaves.find({}, sort=[("applied_at", -1)])
        names = await self._names_by_id()
        return [self._to_response(d, names) for d in documents]

    async def get_leaves_for_user(self, user_id: Any) -> List[LeaveResponse]:
        # Owners may be stored as ObjectId or string; compare string forms.
        return [leave for leave in await self.get_all_leaves() if same_id(leave.user_id, user_id)]

    async def get_leave_by_id(self, leave_id: Any) -> Optional[LeaveResponse]:
        query_id = await self._query_id(leave_id)
        if query_id is None:
            return None
        leaves = await self._leaves()
        raw = await leaves.find_one({"_id": query_id})
        if not raw:
            return None
        user = await self.get_user_by_id(raw.get("user_id"))
        names = {normalize_id(raw.get("user_id")): user.name} if user else {}
        return self._to_response(raw, names)

    async def create_leave(self, data: Dict[str, Any]) -> LeaveResponse:
        """Store a new pending leave. Input is validated by the caller."""
        leaves = await self._leaves()
        document = LeaveDocument.to_storage(data, await self._query_id(data["user_id"]))
        await leaves.insert_one(document)
        logger.info(f"Leave {normalize_id(document['_id'])} created for user {normalize_id(document['user_id'])}")
        return self._to_response(document)

    async def update_leave_status(self, leave_id: Any, status: RequestStatus) -> Optional[LeaveResponse]:
        """Set the status of one leave; ``None`` when no leave matched."""
        query_id = await self._query_id(leave_id)
        if query_id is None:
            return None
        status_value = status.value if isinstance(status, RequestStatus) else status
        leaves = await self._leaves()
        matched = await leaves.update_one(
            {"_id": query_id},
            LeaveDocument.stamp_update({"status": status_value}),
        )
        if matched == 0:
            return None
        return await self.get_leave_by_id(leave_id)

    async def update_leave_statuses(self, leave_ids: List[Any], status: RequestStatus) -> List[StatusUpdateResult]:
        """Apply one status to several leaves, one update each.

        Not atomic: every id gets its own outcome and earlier successes are
        never rolled back.
        """
        results = []
        for leave_id in leave_ids:
            try:
                updated = await self.update_leave_status(leave_id, status)
            except Exception as e:
                logger.exception(f"Failed to update leave {leave_id}: {e}")
                results.append(StatusUpdateResult(id=str(leave_id), ok=False, error=str(e)))
                continue
            if updated is None:
                results.append(StatusUpdateResult(id=str(leave_id), ok=False, error="Leave not found"))
            else:
                results.append(StatusUpdateResult(id=updated.id, ok=True))
        return results

    async def delete_leave(self, leave_id: Any) -> Optional[LeaveResponse]:
        existing = await self.get_leave_by_id(leave_id)
        if existing is None:
            return None
        leaves = await self._leaves()
        await leaves.delete_one({"_id": await self._query_id(leave_id)})
        logger.info(f"Leave {existing.id} deleted")
        return existing

    async def clear_leaves(self) -> Dict[str, Any]:
        """Delete every leave; in-memory data is left to reset on restart."""
        if self.store.is_ephemeral:
            logger.info("In-memory database - leaves will be cleared on restart")
            return {"deleted_count": 0, "ephemeral": True}
        leaves = await self._leaves()
        deleted = await leaves.delete_many({})
        logger.info(f"Cleared {deleted} leaves from database")
        return {"deleted_count": deleted, "ephemeral": False}

    # ------------------------------
    # Statistics
    # ------------------------------
    async def _leave_records(self) -> List[Dict[str, Any]]:
        # Counted in API shape so defaults and unknown values match what is listed.
        return [LeaveDocument.to_api(d) for d in await (await self._leaves()).find({})]

    async def get_stats(self) -> StatsOverviewResponse:
        """Organisation-wide counts. Returns an all-zero snapshot on any failure."""
        try:
            employees = await self.get_employees()
            leaves = await self._leave_records()
            return StatsOverviewResponse(
                totalEmployees=len(employees),
                totalLeaves=len(leaves),
                pendingLeaves=_count(leaves, "status", RequestStatus.pending.value),
                approvedLeaves=_count(leaves, "status", RequestStatus.approved.value),
                rejectedLeaves=_count(leaves, "status", RequestStatus.rejected.value),
                leaveTypeBreakdown=LeaveTypeBreakdown(**{
                    t.value: _count(leaves, "leave_type", t.value) for t in LeaveType
                }),
            )
        except Exception as e:
            logger.exception(f"Error in get_stats: {e}")
            return StatsOverviewResponse()

    async def get_employee_stats(self) -> List[EmployeeStatsResponse]:
        """Per-employee counts. Returns an empty list on any failure."""
        try:
            employees = await self.get_employees()
            leaves = await self._leave_records()
            stats = []
            for employee in employees:
                own = [l for l in leaves if same_id(l.get("user_id"), employee.id)]
                stats.append(EmployeeStatsResponse(
                    id=employee.id,
                    name=employee.name,
                    total_leaves=len(own),
                    approved_leaves=_count(own, "status", RequestStatus.approved.value),
                    pending_leaves=_count(own, "status", RequestStatus.pending.value),
                    casual_leaves=_count(own, "leave_type", LeaveType.casual.value),
                    medical_leaves=_count(own, "leave_type", LeaveType.medical.value),
                    halfday_leaves=_count(own, "leave_type", LeaveType.halfday.value),
                    short_leaves=_count(own, "leave_type", LeaveType.short.value),
                ))
            return stats
        except Exception as e:
            logger.exception(f"Error in get_employee_stats: {e}")
            return []


def _count(documents: List[Dict[str, Any]], field: str, value: str) -> int:
    return sum(1 for d in documents if d.get(field) == value)
