from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from app.config.roles_config import DEFAULT_PLAN, DEFAULT_ROLE

NO_NAME = "No name"
NO_EMAIL = "No email"


class UserView(BaseModel):
    """Identity record + profile record, merged per request"""
    id: str
    full_name: str = NO_NAME
    email: str = NO_EMAIL
    role_id: str = DEFAULT_ROLE
    plan: str = DEFAULT_PLAN
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Pagination(BaseModel):
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")
    total_count: int = Field(alias="totalCount")

    class Config:
        populate_by_name = True


class UserTableResponse(BaseModel):
    users: List[UserView]
    pagination: Pagination


class UserQuery(BaseModel):
    page: int = 1
    page_size: int = 10
    sort_by: str = "created_at"
    sort_order: str = "desc"
    search: str = ""
    role: Optional[str] = None
    plan: Optional[str] = None


class UserStats(BaseModel):
    total: int = 0
    free: int = 0
    pro: int = 0
    enterprise: int = 0
    admins: int = 0


class StatsResponse(BaseModel):
    stats: UserStats
    profile: Dict[str, Any]


class CreateUserRequest(BaseModel):
    # Optional so missing fields get the 400 message instead of a 422
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    role_id: Optional[str] = None
    plan: Optional[str] = None


class CreatedUser(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role_id: str
    plan: str
    created_at: Optional[str] = None


class CreateUserResponse(BaseModel):
    success: bool = True
    user: CreatedUser


class DeleteUserResponse(BaseModel):
    success: bool = True
    message: str


class UpdateRoleRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    new_role: Optional[str] = Field(default=None, alias="newRole")

    class Config:
        populate_by_name = True


class UpdateRoleResponse(BaseModel):
    success: bool = True
    user: Dict[str, Any]
    message: str


class BoardColumn(BaseModel):
    id: str
    title: str
    users: List[UserView]


class BoardResponse(BaseModel):
    columns: List[BoardColumn]
    total_count: int = Field(alias="totalCount")

    class Config:
        populate_by_name = True
