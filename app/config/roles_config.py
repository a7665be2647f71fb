"""
Roles and Plans Configuration
This config defines the closed role and plan enumerations stored on the profile table.
Used by the admin dependencies, the admin user service, the role board and the seed script.
"""

# Roles stored in profile.role_id
ROLES = {
    "client": {
        "label": "Client",
        "is_admin": False,
        "description": "Regular customer account, redirected to the dashboard"
    },
    "admin": {
        "label": "Admin",
        "is_admin": True,
        "description": "Can manage users from the admin panel"
    },
    "owner": {
        "label": "Owner",
        "is_admin": True,
        "description": "Account owner; same admin access as admin"
    }
}

# Plans stored in profile.plan (display/entitlement label only)
PLANS = {
    "free": {
        "label": "Free",
        "description": "Free tier"
    },
    "pro": {
        "label": "Pro",
        "description": "Paid tier"
    },
    "enterprise": {
        "label": "Enterprise",
        "description": "Enterprise tier"
    }
}

DEFAULT_ROLE = "client"
DEFAULT_PLAN = "free"

ADMIN_ROLES = tuple(name for name, role in ROLES.items() if role["is_admin"])

# Profile columns the store is allowed to sort on
SORTABLE_COLUMNS = ("created_at", "updated_at", "full_name", "role_id", "plan")

# Kanban column order, left to right
BOARD_COLUMNS = ("owner", "admin", "client")


def is_admin_role(role_id) -> bool:
    return role_id in ADMIN_ROLES


def get_role_matrix():
    """
    Returns the roles and plans for dialogs and filter tabs
    Format: {
        "roles": [{"id": "client", "label": "Client", "is_admin": False, "description": "..."}, ...],
        "plans": [{"id": "free", "label": "Free", "description": "..."}, ...],
        "default_role": "client",
        "default_plan": "free"
    }
    """
    roles = [{"id": role_id, **role_config} for role_id, role_config in ROLES.items()]
    plans = [{"id": plan_id, **plan_config} for plan_id, plan_config in PLANS.items()]

    return {
        "roles": roles,
        "plans": plans,
        "default_role": DEFAULT_ROLE,
        "default_plan": DEFAULT_PLAN
    }
