from fastapi import APIRouter, Depends, HTTPException, Query, Response
from app.config.roles_config import get_role_matrix
from app.config.settings import settings
from app.database.supabase_client import get_service_supabase
from app.modules.admin import query
from app.modules.admin.export import users_to_csv
from app.modules.admin.schemas import (
    UserQuery, UserTableResponse, StatsResponse, BoardResponse,
    CreateUserRequest, CreateUserResponse, DeleteUserResponse,
    UpdateRoleRequest, UpdateRoleResponse
)
from app.modules.admin.service import AdminUserService
from app.core.dependencies import CallerContext, require_admin
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminUserService:
    return AdminUserService(supabase)


def get_user_query(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, alias="pageSize", ge=1, le=settings.max_page_size),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    search: str = "",
    role: Optional[str] = None,
    plan: Optional[str] = None,
) -> UserQuery:
    return UserQuery(
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        role=role or None,
        plan=plan or None,
    )


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    caller: CallerContext = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service)
):
    """User counts by plan plus admins, and the caller's profile"""
    return StatsResponse(stats=service.get_stats(), profile=caller.profile)


@router.get("/roles")
async def get_roles(caller: CallerContext = Depends(require_admin)):
    """Roles and plans for the create dialog and filter tabs"""
    return get_role_matrix()


@router.get("/users", response_model=UserTableResponse)
async def list_users(
    user_query: UserQuery = Depends(get_user_query),
    caller: CallerContext = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service)
):
    """Paginated, filtered, sorted and searched user table"""
    return service.list_users(user_query)


@router.get("/users/export")
async def export_users(
    user_query: UserQuery = Depends(get_user_query),
    caller: CallerContext = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service)
):
    """Every user matching the filters and search, as CSV"""
    users = service.collect_users(user_query)
    if not users:
        raise HTTPException(status_code=404, detail="No data to export")
    return Response(
        content=users_to_csv(users),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="users.csv"'},
    )


@router.get("/users/board", response_model=BoardResponse)
async def get_board(
    user_query: UserQuery = Depends(get_user_query),
    caller: CallerContext = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service)
):
    """Users matching the filters and search, grouped into role columns"""
    columns = query.group_by_role(service.collect_users(user_query))
    return BoardResponse(columns=columns, total_count=sum(len(column.users) for column in columns))


@router.post("/users/create", response_model=CreateUserResponse)
async def create_user(
    user_data: CreateUserRequest,
    caller: CallerContext = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service)
):
    """Create a user with a confirmed email and a profile"""
    return service.create_user(user_data)


@router.delete("/users/delete", response_model=DeleteUserResponse)
async def delete_user(
    user_id: Optional[str] = Query(None, alias="userId"),
    caller: CallerContext = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service)
):
    """Delete a user other than the caller"""
    return service.delete_user(user_id, caller.id)


@router.patch("/users/update-role", response_model=UpdateRoleResponse)
async def update_role(
    role_data: UpdateRoleRequest,
    caller: CallerContext = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service)
):
    """Change a user's role"""
    return service.update_role(role_data)
