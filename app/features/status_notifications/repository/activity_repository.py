"""
Writes to the project_activity_logs table.
"""

from typing import Any

from psycopg.types.json import Jsonb

from app.db.helpers import execute_query
from app.db.pool import DatabasePoolManager


class ProjectActivityRepository:
    def __init__(self, db: DatabasePoolManager):
        self.db = db

    async def insert_entry(
        self,
        project_id: int,
        action: str,
        message: str,
        user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        query = """
            INSERT INTO project_activity_logs (project_id, user_id, action, message, metadata)
            VALUES (%s, %s, %s, %s, %s)
        """
        async with self.db.connection() as conn:
            affected = await execute_query(
                query,
                (project_id, user_id, action, message, Jsonb(metadata or {})),
                connection=conn,
            )
        return affected > 0
