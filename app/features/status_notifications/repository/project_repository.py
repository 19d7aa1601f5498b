"""
Raw SQL helpers for the projects table.
"""

from typing import Any

from app.db.helpers import fetch_one, with_db_retry
from app.db.pool import DatabasePoolManager
from app.infrastructure.observability.logging import get_logger

from ..domain.models import Project

logger = get_logger(__name__)

_PROJECT_COLUMNS = "id, title, address, author_id, assigned_to_id, status, updated_at"


def row_to_project(row: dict[str, Any]) -> Project:
    return Project(
        id=int(row["id"]),
        title=row.get("title"),
        address=row.get("address"),
        author_id=str(row["author_id"]) if row.get("author_id") else None,
        assigned_to_id=str(row["assigned_to_id"]) if row.get("assigned_to_id") else None,
        status=row.get("status"),
        updated_at=row.get("updated_at"),
    )


class ProjectRepository:
    def __init__(self, db: DatabasePoolManager):
        self.db = db

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_project(self, project_id: int) -> Project | None:
        query = f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE id = %s"
        async with self.db.connection() as conn:
            row = await fetch_one(query, (project_id,), connection=conn)
        return row_to_project(row) if row else None

    async def update_status(
        self, project_id: int, new_status: int, *, expected_status: int | None = None
    ) -> Project | None:
        """
        Write the new status and return the updated row.

        With expected_status set the write only applies while the row still
        holds that status; None is returned when nothing matched.
        """
        query = f"""
            UPDATE projects
            SET status = %s, updated_at = NOW()
            WHERE id = %s
            {"AND status = %s" if expected_status is not None else ""}
            RETURNING {_PROJECT_COLUMNS}
        """
        params: tuple = (new_status, project_id)
        if expected_status is not None:
            params += (expected_status,)

        async with self.db.connection() as conn:
            row = await fetch_one(query, params, connection=conn)

        if not row:
            logger.warning(
                "Project status update matched no rows",
                project_id=project_id,
                new_status=new_status,
                expected_status=expected_status,
            )
            return None

        logger.info("Project status updated", project_id=project_id, new_status=new_status)
        return row_to_project(row)
