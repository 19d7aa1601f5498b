"""
Status data aggregation.

Builds the ProjectContext for one (project, target status) pair. Every
required record must resolve or the whole aggregation fails; nothing
downstream ever sees a partially populated author.
"""

import asyncio

from app.infrastructure.observability.logging import get_logger

from ..domain.errors import ProfileNotFound, ProjectNotFound, StatusNotFound
from ..domain.models import CompanyInfo, NotifyRole, Profile, ProjectContext, Role
from ..repository import ProfileRepository, ProjectRepository, StatusCatalogRepository

logger = get_logger(__name__)


class StatusDataAggregator:
    def __init__(
        self,
        projects: ProjectRepository,
        profiles: ProfileRepository,
        statuses: StatusCatalogRepository,
        company: CompanyInfo,
        base_url: str,
    ):
        self.projects = projects
        self.profiles = profiles
        self.statuses = statuses
        self.company = company
        self.base_url = base_url

    async def aggregate(self, project_id: int, target_status_code: int) -> ProjectContext:
        """
        Fetch project, author, status entry and optional assigned staff.

        Raises:
            ProjectNotFound: no project row for project_id
            ProfileNotFound: author missing or without a resolvable email
            StatusNotFound: no catalog entry for target_status_code
        """
        project, status_entry = await asyncio.gather(
            self.projects.get_project(project_id),
            self.statuses.get_entry(target_status_code),
        )

        if project is None:
            logger.warning("Aggregation failed - project not found", project_id=project_id)
            raise ProjectNotFound(project_id)

        if status_entry is None:
            logger.warning(
                "Aggregation failed - status not found",
                project_id=project_id,
                status_code=target_status_code,
            )
            raise StatusNotFound(target_status_code)

        if not project.author_id:
            raise ProfileNotFound(None, reason="project has no author")

        wants_admins = any(
            NotifyRole.parse(role) is NotifyRole.ADMIN for role in status_entry.notify_roles
        )

        author, staff, admins = await asyncio.gather(
            self.profiles.get_profile(project.author_id),
            self._load_staff(project.assigned_to_id),
            self._load_admins(wants_admins),
        )

        if author is None:
            logger.warning(
                "Aggregation failed - author profile not found",
                project_id=project_id,
                author_id=project.author_id,
            )
            raise ProfileNotFound(project.author_id)

        if not author.email:
            logger.warning(
                "Aggregation failed - author has no email",
                project_id=project_id,
                author_id=project.author_id,
            )
            raise ProfileNotFound(project.author_id, reason="no email")

        logger.debug(
            "Project context aggregated",
            project_id=project_id,
            status_code=target_status_code,
            has_staff=staff is not None,
            admin_count=len(admins),
        )

        return ProjectContext(
            project=project,
            author_profile=author,
            status_entry=status_entry,
            assigned_staff_profile=staff,
            company=self.company,
            base_url=self.base_url,
            admin_profiles=admins,
        )

    async def _load_staff(self, staff_id: str | None) -> Profile | None:
        if not staff_id:
            return None
        staff = await self.profiles.get_profile(staff_id)
        if staff is None:
            logger.info("Assigned staff profile not found", staff_id=staff_id)
        return staff

    async def _load_admins(self, wanted: bool) -> list[Profile]:
        if not wanted:
            return []
        return await self.profiles.list_profiles_by_role(Role.ADMIN)
