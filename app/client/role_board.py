"""
Kanban view of users by role, with optimistic role changes.

A drag to another column is applied locally first (``move``), then either
reconciled with the row the server returns (``confirm``) or undone
(``rollback``). Only one change per user can be in flight.
"""

import logging
import httpx
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.config.roles_config import BOARD_COLUMNS, ROLES
from app.client.admin_client import AdminApiClient, AdminApiError

logger = logging.getLogger(__name__)


class MoveState(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    rolled_back = "rolled_back"


@dataclass
class PendingMove:
    user_id: str
    from_role: str
    to_role: str
    state: MoveState = MoveState.pending
    error: Optional[str] = None


@dataclass
class RoleBoard:
    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    in_flight: Dict[str, PendingMove] = field(default_factory=dict)

    @classmethod
    def from_users(cls, users: Iterable[Dict[str, Any]]) -> "RoleBoard":
        return cls(users={user["id"]: dict(user) for user in users})

    @classmethod
    def from_board_response(cls, board: Dict[str, Any]) -> "RoleBoard":
        return cls.from_users(user for column in board["columns"] for user in column["users"])

    def column(self, role_id: str) -> List[Dict[str, Any]]:
        return [user for user in self.users.values() if user.get("role_id") == role_id]

    def columns(self) -> Dict[str, List[Dict[str, Any]]]:
        return {role_id: self.column(role_id) for role_id in BOARD_COLUMNS}

    def move(self, user_id: str, to_role: str) -> Optional[PendingMove]:
        """Apply a role change locally. Returns None when the user is already in that column."""
        if to_role not in ROLES:
            raise ValueError(f"Unknown column: {to_role}")
        user = self.users.get(user_id)
        if user is None:
            raise ValueError(f"Unknown user: {user_id}")
        if user_id in self.in_flight:
            raise ValueError(f"A role change for {user_id} is already in flight")
        if user.get("role_id") == to_role:
            return None

        pending = PendingMove(user_id=user_id, from_role=user.get("role_id"), to_role=to_role)
        user["role_id"] = to_role
        self.in_flight[user_id] = pending
        return pending

    def confirm(self, pending: PendingMove, server_row: Optional[Dict[str, Any]] = None) -> PendingMove:
        """Server accepted the change; its row wins for the fields it returns"""
        self._finish(pending)
        if server_row:
            self.users[pending.user_id].update(
                {key: value for key, value in server_row.items() if key in ("role_id", "plan", "full_name", "updated_at")}
            )
        pending.state = MoveState.confirmed
        return pending

    def rollback(self, pending: PendingMove, error: Optional[str] = None) -> PendingMove:
        """Server rejected the change; restore the previous role"""
        self._finish(pending)
        self.users[pending.user_id]["role_id"] = pending.from_role
        pending.state = MoveState.rolled_back
        pending.error = error
        return pending

    def _finish(self, pending: PendingMove):
        if self.in_flight.get(pending.user_id) is not pending:
            raise ValueError(f"Move for {pending.user_id} is not in flight")
        del self.in_flight[pending.user_id]


def apply_role_change(board: RoleBoard, client: AdminApiClient, user_id: str, to_role: str) -> Optional[PendingMove]:
    """Optimistically move a user, then persist it through the admin API"""
    pending = board.move(user_id, to_role)
    if pending is None:
        return None
    try:
        result = client.update_role(user_id, to_role)
    except AdminApiError as e:
        logger.warning(f"Role change for {user_id} rejected: {e.message}")
        return board.rollback(pending, e.message)
    except httpx.HTTPError as e:
        logger.warning(f"Role change for {user_id} failed: {e}")
        return board.rollback(pending, str(e))
    except Exception as e:
        # e.g. a 2xx with a non-JSON body from a proxy; the outcome is unknown, show the old role
        logger.exception(f"Unexpected response to role change for {user_id}: {e}")
        return board.rollback(pending, str(e) or type(e).__name__)
    return board.confirm(pending, result.get("user") if isinstance(result, dict) else None)
