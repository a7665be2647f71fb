import logging
import httpx
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AdminApiError(Exception):
    """Non-2xx response from the admin API"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class AdminApiClient:
    """HTTP client for the admin endpoints, as used by the dashboard.

    Takes an ``httpx.Client`` so the caller owns base URL, auth headers,
    cookies and timeouts (a FastAPI ``TestClient`` works too).
    """

    def __init__(self, http: httpx.Client, prefix: str = "/api/v1"):
        self.http = http
        self.prefix = prefix.rstrip("/")

    @classmethod
    def connect(cls, base_url: str, access_token: str, timeout: float = 10.0, **client_kwargs) -> "AdminApiClient":
        http = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            **client_kwargs,
        )
        return cls(http)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.http.request(method, f"{self.prefix}{path}", **kwargs)
        if response.is_success:
            return response
        try:
            message = response.json().get("detail") or response.reason_phrase
        except (ValueError, AttributeError):
            message = response.text or response.reason_phrase
        if not isinstance(message, str):
            message = str(message)
        logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
        raise AdminApiError(response.status_code, message)

    def get_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/admin/stats").json()

    def get_roles(self) -> Dict[str, Any]:
        return self._request("GET", "/admin/roles").json()

    def list_users(
        self,
        page: int = 1,
        page_size: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        search: str = "",
        role: Optional[str] = None,
        plan: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {
            "page": page,
            "pageSize": page_size,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }
        if search:
            params["search"] = search
        if role:
            params["role"] = role
        if plan:
            params["plan"] = plan
        return self._request("GET", "/admin/users", params=params).json()

    def get_board(self, search: str = "", role: Optional[str] = None, plan: Optional[str] = None) -> Dict[str, Any]:
        params = {}
        if search:
            params["search"] = search
        if role:
            params["role"] = role
        if plan:
            params["plan"] = plan
        return self._request("GET", "/admin/users/board", params=params).json()

    def export_users(self, search: str = "", role: Optional[str] = None, plan: Optional[str] = None) -> str:
        params = {}
        if search:
            params["search"] = search
        if role:
            params["role"] = role
        if plan:
            params["plan"] = plan
        return self._request("GET", "/admin/users/export", params=params).text

    def create_user(self, email: str, password: str, full_name: str, role_id: str, plan: str) -> Dict[str, Any]:
        body = {
            "email": email,
            "password": password,
            "full_name": full_name,
            "role_id": role_id,
            "plan": plan,
        }
        return self._request("POST", "/admin/users/create", json=body).json()

    def delete_user(self, user_id: str) -> Dict[str, Any]:
        return self._request("DELETE", "/admin/users/delete", params={"userId": user_id}).json()

    def update_role(self, user_id: str, new_role: str) -> Dict[str, Any]:
        body = {"userId": user_id, "newRole": new_role}
        return self._request("PATCH", "/admin/users/update-role", json=body).json()
