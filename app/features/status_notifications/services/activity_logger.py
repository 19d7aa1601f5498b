"""
Project activity logging.

Every status change and email delivery attempt is recorded against the
project so the project timeline shows who changed what and which
notifications went out.

Entries go to two places:
1. Structured logs (stdout) - always, and first
2. project_activity_logs table - best effort

A failed database write is logged and reported as False; it never fails the
operation that produced the entry.
"""

from datetime import UTC, datetime
from typing import Any

from app.infrastructure.observability.logging import get_logger

from ..repository import ProjectActivityRepository

logger = get_logger(__name__)

STATUS_CHANGE = "statusChange"
EMAIL_SENT = "emailSent"
EMAIL_FAILED = "emailFailed"


class ProjectActivityLogger:
    def __init__(self, repository: ProjectActivityRepository):
        self.repository = repository

    async def log(
        self,
        project_id: int,
        action: str,
        message: str,
        user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """
        Record one activity entry.

        Returns:
            True if the database write succeeded, False otherwise (never raises)
        """
        logger.info(
            "Project activity",
            activity_action=action,
            project_id=project_id,
            user_id=user_id,
            activity_message=message,
        )

        try:
            return await self.repository.insert_entry(
                project_id=project_id,
                action=action,
                message=message,
                user_id=user_id,
                metadata=metadata,
            )
        except Exception as e:
            logger.error(
                "Failed to write project activity log",
                error=str(e),
                error_type=type(e).__name__,
                activity_action=action,
                project_id=project_id,
                fallback_data={
                    "project_id": project_id,
                    "user_id": user_id,
                    "action": action,
                    "message": message,
                    "timestamp": datetime.now(UTC).isoformat(),
                },
            )
            return False

    async def log_status_change(
        self,
        project_id: int,
        user_id: str | None,
        old_status: int | None,
        new_status: int,
        status_name: str = "",
    ) -> bool:
        label = f" ({status_name})" if status_name else ""
        return await self.log(
            project_id,
            STATUS_CHANGE,
            f"Status changed from {old_status} to {new_status}{label}",
            user_id=user_id,
            metadata={"old_status": old_status, "new_status": new_status},
        )

    async def log_email_sent(
        self, project_id: int, recipient: str, subject: str, message_id: str | None
    ) -> bool:
        return await self.log(
            project_id,
            EMAIL_SENT,
            f"Email sent successfully to {recipient} - Subject: {subject}",
            metadata={"recipient": recipient, "subject": subject, "response_id": message_id},
        )

    async def log_email_failed(
        self, project_id: int, recipient: str, subject: str, reason: str
    ) -> bool:
        return await self.log(
            project_id,
            EMAIL_FAILED,
            f"Email delivery failed to {recipient} - Subject: {subject}, Error: {reason}",
            metadata={"recipient": recipient, "subject": subject, "error": reason},
        )
