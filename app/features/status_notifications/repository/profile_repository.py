"""
Profile lookups.

Emails come from profiles.email and fall back to the Supabase auth.users
row when the profile copy is empty.
"""

from typing import Any

from app.db.helpers import fetch_all, fetch_one, with_db_retry
from app.db.pool import DatabasePoolManager
from app.infrastructure.observability.logging import get_logger

from ..domain.models import Profile, Role

logger = get_logger(__name__)

_PROFILE_SELECT = """
    SELECT
        p.id,
        COALESCE(NULLIF(p.email, ''), au.email) AS email,
        p.first_name,
        p.last_name,
        p.company_name,
        p.role
    FROM profiles p
    LEFT JOIN auth.users au ON au.id = p.id
"""


def row_to_profile(row: dict[str, Any]) -> Profile:
    return Profile(
        id=str(row["id"]),
        email=row.get("email") or None,
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        company_name=row.get("company_name"),
        role=Role.parse(row.get("role")),
    )


class ProfileRepository:
    def __init__(self, db: DatabasePoolManager):
        self.db = db

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_profile(self, profile_id: str) -> Profile | None:
        query = f"{_PROFILE_SELECT} WHERE p.id = %s"
        async with self.db.connection() as conn:
            row = await fetch_one(query, (profile_id,), connection=conn)
        return row_to_profile(row) if row else None

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_profiles_by_role(self, role: Role) -> list[Profile]:
        # role casing is inconsistent in stored rows
        query = f"{_PROFILE_SELECT} WHERE lower(p.role) = lower(%s) ORDER BY p.id"
        async with self.db.connection() as conn:
            rows = await fetch_all(query, (role.value,), connection=conn)

        profiles = [row_to_profile(row) for row in rows]
        logger.debug("Profiles loaded by role", role=role.value, count=len(profiles))
        return profiles
