"""
Status processing: role-aware template selection and recipient derivation.

Admin and Staff viewers read the admin_* templates, everyone else reads the
client_* templates. Recipients come from the catalog entry's notify roles:

    admin           -> every profile with role Admin
    staff           -> the project's assigned staff member only
    client / author -> the project author

Recipient addresses are de-duplicated case-insensitively, first seen wins.
"""

from collections.abc import Iterable

from app.infrastructure.observability.logging import get_logger

from ..domain.models import (
    NotificationJob,
    NotifyRole,
    ProcessedStatus,
    ProjectContext,
    Role,
)
from .placeholders import substitute

logger = get_logger(__name__)

DEFAULT_BUTTON_PATH = "/dashboard"


def absolute_link(link: str, base_url: str) -> str:
    """Make a button link absolute against base_url. Empty links go to the dashboard."""
    base = base_url.rstrip("/")
    if not link:
        return f"{base}{DEFAULT_BUTTON_PATH}"
    if link.startswith(("http://", "https://", "mailto:", "tel:")):
        return link
    return f"{base}/{link.lstrip('/')}"


class StatusProcessor:
    def __init__(self, default_button_text: str = "Access Your Dashboard"):
        self.default_button_text = default_button_text

    def process(
        self,
        context: ProjectContext,
        viewer_role: Role | str,
        *,
        audience: Iterable[NotifyRole] | None = None,
    ) -> ProcessedStatus:
        """
        Build the outbound message for viewer_role.

        Args:
            context: Aggregated project context
            viewer_role: Role whose templates are used
            audience: Restrict recipients to these notify roles (all when None)

        Returns:
            ProcessedStatus with substituted fields and one job per recipient
        """
        role = Role.parse(viewer_role)
        entry = context.status_entry

        subject = substitute(entry.email_subject_for(role), context, role)
        message = substitute(entry.email_content_for(role), context, role)
        status_name = substitute(entry.status_name_for(role), context, role)
        button_text = substitute(entry.button_text, context, role) or self.default_button_text
        button_link = absolute_link(substitute(entry.button_link, context, role), context.base_url)
        modal_message = substitute(entry.modal_for(role), context, role)
        redirect_url = substitute(entry.redirect_for(role), context, role) or None

        recipients = self.derive_recipients(context, audience)
        jobs = [
            NotificationJob(
                recipient_email=email,
                subject=subject,
                body_html=message,
                button_text=button_text,
                button_link=button_link,
                # open/click tracking is only wanted on client-facing mail
                skip_tracking=role.is_admin_or_staff,
                project_id=context.project.id,
                status_code=entry.status_code,
            )
            for email in recipients
        ]

        logger.debug(
            "Status processed",
            project_id=context.project.id,
            status_code=entry.status_code,
            role=role.value,
            recipient_count=len(recipients),
        )

        return ProcessedStatus(
            role=role,
            status_name=status_name,
            subject=subject,
            message=message,
            button_text=button_text,
            button_link=button_link,
            recipients=recipients,
            jobs=jobs,
            modal_message=modal_message,
            redirect_url=redirect_url,
        )

    def derive_recipients(
        self,
        context: ProjectContext,
        audience: Iterable[NotifyRole] | None = None,
    ) -> list[str]:
        allowed = set(audience) if audience is not None else None
        recipients: list[str] = []
        seen: set[str] = set()

        def add(email: str | None) -> None:
            if not email:
                return
            key = email.strip().lower()
            if key and key not in seen:
                seen.add(key)
                recipients.append(email.strip())

        for raw_role in context.status_entry.notify_roles:
            notify_role = NotifyRole.parse(raw_role)
            if notify_role is None:
                logger.warning(
                    "Unknown notify role in status catalog",
                    notify_role=raw_role,
                    status_code=context.status_entry.status_code,
                )
                continue
            if allowed is not None and notify_role not in allowed:
                continue

            if notify_role is NotifyRole.ADMIN:
                for profile in context.admin_profiles:
                    add(profile.email)
            elif notify_role is NotifyRole.STAFF:
                if context.assigned_staff_profile:
                    add(context.assigned_staff_profile.email)
            else:
                add(context.author_profile.email)

        return recipients
