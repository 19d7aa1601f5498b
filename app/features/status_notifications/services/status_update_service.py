"""
Status update orchestration.

Order of operations for one status change:

1. Aggregate the project context for the target status. Any missing record
   aborts here, before anything is written.
2. Persist the new status.
3. Record the change in the project activity log (best effort).
4. Process the status once per audience (admin/staff text, client text).
5. Dispatch every notification job.

The status write in step 2 is final: notification failures in step 5 are
reported in the result, never raised, and never roll the write back.
"""

from app.infrastructure.observability.logging import get_logger

from ..domain.errors import ProjectNotFound, StatusConflict
from ..domain.models import (
    Actor,
    NotificationJob,
    NotifyRole,
    ProcessedStatus,
    ProjectContext,
    Role,
    StatusUpdateResult,
)
from ..pipeline import StatusDataAggregator, StatusProcessor, placeholder_values
from ..repository import ProjectRepository
from .activity_logger import ProjectActivityLogger
from .dispatcher import NotificationDispatcher

logger = get_logger(__name__)


def audiences_for(context: ProjectContext) -> dict[Role, set[NotifyRole]]:
    """Group the entry's notify roles by which template set they read."""
    grouped: dict[Role, set[NotifyRole]] = {}
    for raw_role in context.status_entry.notify_roles:
        notify_role = NotifyRole.parse(raw_role)
        if notify_role is not None:
            grouped.setdefault(notify_role.audience, set()).add(notify_role)
    return grouped


def merge_jobs(*job_lists: list[NotificationJob]) -> list[NotificationJob]:
    """Concatenate job lists keeping only the first job per email address."""
    merged: list[NotificationJob] = []
    seen: set[str] = set()
    for jobs in job_lists:
        for job in jobs:
            key = job.recipient_email.strip().lower()
            if key not in seen:
                seen.add(key)
                merged.append(job)
    return merged


class StatusUpdateService:
    def __init__(
        self,
        aggregator: StatusDataAggregator,
        processor: StatusProcessor,
        dispatcher: NotificationDispatcher,
        projects: ProjectRepository,
        activity_logger: ProjectActivityLogger,
    ):
        self.aggregator = aggregator
        self.processor = processor
        self.dispatcher = dispatcher
        self.projects = projects
        self.activity_logger = activity_logger

    async def update_status(
        self,
        project_id: int,
        new_status: int,
        actor: Actor,
        *,
        expected_status: int | None = None,
    ) -> StatusUpdateResult:
        """
        Change a project's status and notify the configured recipients.

        Raises:
            NotFoundError: project, author profile or status entry missing (nothing written)
            StatusConflict: expected_status given and the project no longer holds it
            DatabaseError: the status write itself failed
        """
        context = await self.aggregator.aggregate(project_id, new_status)
        old_status = context.project.status

        updated = await self.projects.update_status(
            project_id, new_status, expected_status=expected_status
        )
        if updated is None:
            if expected_status is not None:
                raise StatusConflict(project_id, expected_status)
            raise ProjectNotFound(project_id)
        context.project = updated

        await self.activity_logger.log_status_change(
            project_id,
            actor.user_id,
            old_status,
            new_status,
            status_name=context.status_entry.admin_status_name,
        )

        processed = self._process_audiences(context)
        viewer_view = self.processor.process(context, actor.role, audience=())

        # client jobs first so an author who is also an admin gets client text
        jobs = merge_jobs(
            *(processed[role].jobs for role in (Role.CLIENT, Role.ADMIN) if role in processed)
        )
        notifications = await self.dispatcher.dispatch(jobs)

        logger.info(
            "Project status change completed",
            project_id=project_id,
            user_id=actor.user_id,
            old_status=old_status,
            new_status=new_status,
            notifications_attempted=notifications.attempted,
            notifications_failed=len(notifications.failed),
        )

        return StatusUpdateResult(
            project=updated,
            old_status=old_status,
            new_status=new_status,
            status_persisted=True,
            notifications=notifications,
            modal_message=viewer_view.modal_message,
            redirect_url=viewer_view.redirect_url,
            processed={role.value.lower(): view for role, view in processed.items()},
        )

    async def preview(
        self,
        project_id: int,
        status_code: int,
        actor: Actor,
        viewer_role: Role | None = None,
    ) -> tuple[ProcessedStatus, dict[str, str]]:
        """
        Process a status without writing or sending anything.

        Admin and staff see any project, rendered for viewer_role (their own
        role by default), with every recipient and placeholder value. A client
        only sees projects they authored, rendered with client text, with
        recipients narrowed to their own address and no placeholder values.

        Raises:
            ProjectNotFound: also raised when a client does not own the project
        """
        context = await self.aggregator.aggregate(project_id, status_code)

        if actor.role.is_admin_or_staff:
            role = viewer_role or actor.role
            processed = self.processor.process(context, role)
            return processed, placeholder_values(context, role)

        if context.project.author_id != actor.user_id:
            logger.warning(
                "Preview refused for non-owner",
                project_id=project_id,
                user_id=actor.user_id,
            )
            raise ProjectNotFound(project_id)

        processed = self.processor.process(context, Role.CLIENT)
        own_email = (context.author_profile.email or "").lower()
        processed.recipients = [r for r in processed.recipients if r.lower() == own_email]
        processed.jobs = [j for j in processed.jobs if j.recipient_email.lower() == own_email]
        return processed, {}

    def _process_audiences(self, context: ProjectContext) -> dict[Role, ProcessedStatus]:
        return {
            role: self.processor.process(context, role, audience=notify_roles)
            for role, notify_roles in audiences_for(context).items()
        }
