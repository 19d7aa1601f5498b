"""
Read access to the project_statuses catalog.
"""

from typing import Any

from app.db.helpers import fetch_all, fetch_one, with_db_retry
from app.db.pool import DatabasePoolManager

from ..domain.models import StatusCatalogEntry

_STATUS_COLUMNS = """
    status_code,
    admin_status_name, client_status_name,
    admin_email_subject, admin_email_content,
    client_email_subject, client_email_content,
    notify,
    button_text, button_link, est_time,
    status_color, admin_status_tab, client_status_tab,
    modal_admin, modal_client,
    modal_auto_redirect_admin, modal_auto_redirect_client
"""


def _parse_notify(value: Any) -> list[str]:
    """notify is a text[] in newer rows and a comma separated string in older ones."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


def row_to_status_entry(row: dict[str, Any]) -> StatusCatalogEntry:
    return StatusCatalogEntry(
        status_code=int(row["status_code"]),
        admin_status_name=row.get("admin_status_name") or "",
        client_status_name=row.get("client_status_name") or "",
        admin_email_subject=row.get("admin_email_subject") or "",
        admin_email_content=row.get("admin_email_content") or "",
        client_email_subject=row.get("client_email_subject") or "",
        client_email_content=row.get("client_email_content") or "",
        notify_roles=_parse_notify(row.get("notify")),
        button_text=row.get("button_text") or "",
        button_link=row.get("button_link") or "",
        est_time=row.get("est_time") or "",
        status_color=row.get("status_color"),
        admin_status_tab=row.get("admin_status_tab"),
        client_status_tab=row.get("client_status_tab"),
        modal_admin=row.get("modal_admin"),
        modal_client=row.get("modal_client"),
        modal_auto_redirect_admin=row.get("modal_auto_redirect_admin"),
        modal_auto_redirect_client=row.get("modal_auto_redirect_client"),
    )


class StatusCatalogRepository:
    def __init__(self, db: DatabasePoolManager):
        self.db = db

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_entry(self, status_code: int) -> StatusCatalogEntry | None:
        query = f"SELECT {_STATUS_COLUMNS} FROM project_statuses WHERE status_code = %s"
        async with self.db.connection() as conn:
            row = await fetch_one(query, (status_code,), connection=conn)
        return row_to_status_entry(row) if row else None

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_entries(self) -> list[StatusCatalogEntry]:
        """All statuses except the placeholder code 0, ordered by code."""
        query = f"""
            SELECT {_STATUS_COLUMNS}
            FROM project_statuses
            WHERE status_code <> 0
            ORDER BY status_code
        """
        async with self.db.connection() as conn:
            rows = await fetch_all(query, connection=conn)
        return [row_to_status_entry(row) for row in rows]
