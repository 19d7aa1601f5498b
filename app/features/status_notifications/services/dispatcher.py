"""
Notification dispatcher.

Fans a list of NotificationJobs out to the email client, one independent
delivery per recipient. A failing recipient is recorded and logged; it never
stops its siblings and never raises out of dispatch().
"""

import asyncio
from typing import Protocol

from app.infrastructure.observability.logging import get_logger

from ..domain.models import DispatchFailure, DispatchResult, NotificationJob
from .activity_logger import ProjectActivityLogger

logger = get_logger(__name__)


class EmailSender(Protocol):
    async def send(self, job: NotificationJob) -> str | None: ...


class NotificationDispatcher:
    def __init__(
        self,
        email_client: EmailSender,
        activity_logger: ProjectActivityLogger | None = None,
        max_concurrency: int = 10,
    ):
        self.email_client = email_client
        self.activity_logger = activity_logger
        self.max_concurrency = max(1, max_concurrency)

    async def dispatch(self, jobs: list[NotificationJob]) -> DispatchResult:
        """
        Deliver every job concurrently.

        Returns:
            DispatchResult with the sent count and one DispatchFailure per
            failed recipient, in job order
        """
        if not jobs:
            return DispatchResult()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _deliver(job: NotificationJob) -> DispatchFailure | None:
            async with semaphore:
                try:
                    message_id = await self.email_client.send(job)
                except Exception as e:
                    reason = str(e) or type(e).__name__
                    logger.error(
                        "Notification delivery failed",
                        recipient=job.recipient_email,
                        project_id=job.project_id,
                        status_code=job.status_code,
                        error=reason,
                        error_type=type(e).__name__,
                    )
                    await self._record_failure(job, reason)
                    return DispatchFailure(recipient=job.recipient_email, reason=reason)

            await self._record_success(job, message_id)
            return None

        outcomes = await asyncio.gather(*(_deliver(job) for job in jobs))

        failed = [outcome for outcome in outcomes if outcome is not None]
        result = DispatchResult(sent=len(jobs) - len(failed), failed=failed)

        log = logger.warning if failed else logger.info
        log(
            "Notification dispatch completed",
            attempted=len(jobs),
            sent=result.sent,
            failed=len(failed),
        )
        return result

    async def _record_success(self, job: NotificationJob, message_id: str | None) -> None:
        if self.activity_logger and job.project_id is not None:
            await self.activity_logger.log_email_sent(
                job.project_id, job.recipient_email, job.subject, message_id
            )

    async def _record_failure(self, job: NotificationJob, reason: str) -> None:
        if self.activity_logger and job.project_id is not None:
            await self.activity_logger.log_email_failed(
                job.project_id, job.recipient_email, job.subject, reason
            )
