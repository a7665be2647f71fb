"""
Admin user-listing pipeline: merge, search, paginate.

Filtering by role/plan and sorting happen in the store (profile columns).
Search needs the email from the identity record, so it runs here after the
merge, and pagination has to follow it. Every function is pure so it can
be tested without a Supabase client.
"""

import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.config.roles_config import ADMIN_ROLES, BOARD_COLUMNS, DEFAULT_PLAN, DEFAULT_ROLE, PLANS, ROLES
from app.modules.admin.schemas import NO_EMAIL, NO_NAME, BoardColumn, Pagination, UserStats, UserView


def as_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def merge_user(profile: Dict[str, Any], identity: Optional[Dict[str, Any]] = None) -> UserView:
    """Build the user row shown in the admin table.

    Empty values fall back to the defaults; unexpected role/plan values are
    kept as they are. created_at prefers the identity record.
    """
    identity = identity or {}
    return UserView(
        id=str(profile["id"]),
        full_name=profile.get("full_name") or NO_NAME,
        email=identity.get("email") or NO_EMAIL,
        role_id=profile.get("role_id") or DEFAULT_ROLE,
        plan=profile.get("plan") or DEFAULT_PLAN,
        created_at=as_text(identity.get("created_at") or profile.get("created_at")),
        updated_at=as_text(profile.get("updated_at")),
    )


def merge_users(profiles: Iterable[Dict[str, Any]], identities: Iterable[Dict[str, Any]]) -> List[UserView]:
    """Merge every profile with its identity record, keeping the profile order"""
    by_id = {str(identity["id"]): identity for identity in identities}
    return [merge_user(profile, by_id.get(str(profile["id"]))) for profile in profiles]


def search_users(users: List[UserView], search: Optional[str]) -> List[UserView]:
    """Case-insensitive substring match on full_name or email"""
    if not search:
        return users
    needle = search.lower()
    return [
        user for user in users
        if needle in user.full_name.lower() or needle in user.email.lower()
    ]


def paginate(users: List[UserView], page: int, page_size: int) -> Tuple[List[UserView], Pagination]:
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be positive")
    total_count = len(users)
    start = (page - 1) * page_size
    pagination = Pagination(
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total_count / page_size),
        total_count=total_count,
    )
    return users[start:start + page_size], pagination


def compute_stats(profiles: Iterable[Dict[str, Any]]) -> UserStats:
    stats = UserStats()
    for profile in profiles:
        stats.total += 1
        plan = profile.get("plan")
        if plan in PLANS:
            setattr(stats, plan, getattr(stats, plan) + 1)
        if profile.get("role_id") in ADMIN_ROLES:
            stats.admins += 1
    return stats


def group_by_role(users: List[UserView]) -> List[BoardColumn]:
    """Kanban columns in board order. Users with a role outside the board are left out."""
    columns = []
    for role_id in BOARD_COLUMNS:
        columns.append(BoardColumn(
            id=role_id,
            title=ROLES[role_id]["label"],
            users=[user for user in users if user.role_id == role_id],
        ))
    return columns
