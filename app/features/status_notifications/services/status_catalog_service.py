"""
Role-based views of the status catalog.

Admins and staff see admin names and tabs; clients see client names and
tabs. Each view also carries a URL slug derived from its status name and a
select option for form controls.
"""

import re
from dataclasses import dataclass

from app.infrastructure.observability.logging import get_logger

from ..domain.errors import StatusNotFound
from ..domain.models import Role, StatusCatalogEntry
from ..repository import StatusCatalogRepository

logger = get_logger(__name__)


def status_slug(status_name: str | None) -> str:
    """'Generating Proposal!' -> 'generating-proposal'"""
    slug = re.sub(r"[^a-z0-9\s-]", "", (status_name or "").lower()).strip()
    return re.sub(r"\s+", "-", slug)


@dataclass(slots=True)
class RoleStatusView:
    status_code: int
    status_name: str
    status_tab: str | None
    status_slug: str
    status_color: str | None
    est_time: str

    @property
    def select_option(self) -> dict[str, str]:
        return {"value": str(self.status_code), "label": self.status_name}


def view_for_role(entry: StatusCatalogEntry, role: Role) -> RoleStatusView:
    name = entry.status_name_for(role)
    return RoleStatusView(
        status_code=entry.status_code,
        status_name=name,
        status_tab=entry.status_tab_for(role),
        status_slug=status_slug(name),
        status_color=entry.status_color,
        est_time=entry.est_time,
    )


class StatusCatalogService:
    def __init__(self, repository: StatusCatalogRepository):
        self.repository = repository

    async def get_entry(self, status_code: int) -> StatusCatalogEntry:
        entry = await self.repository.get_entry(status_code)
        if entry is None:
            raise StatusNotFound(status_code)
        return entry

    async def list_for_role(self, role: Role | str) -> list[RoleStatusView]:
        role = Role.parse(role)
        entries = await self.repository.list_entries()
        views = [view_for_role(entry, role) for entry in entries]
        logger.debug("Status catalog listed", role=role.value, count=len(views))
        return views
