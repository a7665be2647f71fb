"""
Seed Admin Script
Promotes an existing account to owner or admin so the admin panel can be used.
Roles otherwise only change through the admin endpoints, which need an admin to begin with.

Usage: python -m app.scripts.seed_admin someone@example.com --role owner
"""

import argparse
import sys
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config.roles_config import ADMIN_ROLES, DEFAULT_PLAN
from app.database.supabase_client import SupabaseClient
from app.modules.admin.service import AdminUserService
from supabase import Client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def find_user_id(supabase: Client, email: str):
    """Look up the auth user id for an email (case-insensitive)"""
    for identity in AdminUserService(supabase).list_identities():
        if (identity.get("email") or "").lower() == email.lower():
            return identity["id"]
    return None


def promote(supabase: Client, email: str, role_id: str) -> str:
    """Set profile.role_id for the account, creating the profile row when missing"""
    user_id = find_user_id(supabase, email)
    if not user_id:
        raise LookupError(f"No account found for {email}")

    existing = supabase.table("profile")\
        .select("id")\
        .eq("id", user_id)\
        .limit(1)\
        .execute()

    if existing.data:
        supabase.table("profile")\
            .update({"role_id": role_id})\
            .eq("id", user_id)\
            .execute()
        logger.info(f"Updated profile {user_id} to {role_id}")
    else:
        supabase.table("profile").insert({
            "id": user_id,
            "full_name": "",
            "role_id": role_id,
            "plan": DEFAULT_PLAN
        }).execute()
        logger.info(f"Created profile {user_id} as {role_id}")
    return user_id


def main(argv=None):
    """Main function to promote an account"""
    parser = argparse.ArgumentParser(description="Promote an account to an admin role")
    parser.add_argument("email", help="Email of an existing account")
    parser.add_argument("--role", choices=ADMIN_ROLES, default="owner")
    args = parser.parse_args(argv)

    try:
        supabase = SupabaseClient.get_service_client()
        promote(supabase, args.email, args.role)
        logger.info("Seeding completed successfully!")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
