"""
Exceptions raised by the status notification pipeline.
"""


class StatusPipelineError(Exception):
    """Base class for status pipeline errors."""

    http_status: int = 500

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(StatusPipelineError):
    """A record required to build the project context is missing."""

    http_status = 404


class ProjectNotFound(NotFoundError):
    def __init__(self, project_id: int):
        super().__init__(f"Project {project_id} not found", project_id=project_id)
        self.project_id = project_id


class ProfileNotFound(NotFoundError):
    def __init__(self, profile_id: str | None, reason: str = "missing"):
        super().__init__(
            f"Profile {profile_id} not found ({reason})", profile_id=profile_id, reason=reason
        )
        self.profile_id = profile_id
        self.reason = reason


class StatusNotFound(NotFoundError):
    def __init__(self, status_code: int):
        super().__init__(f"Status {status_code} not found", status_code=status_code)
        self.status_code = status_code


class StatusConflict(StatusPipelineError):
    """The project's status changed between read and write."""

    http_status = 409

    def __init__(self, project_id: int, expected_status: int):
        super().__init__(
            f"Project {project_id} is no longer in status {expected_status}",
            project_id=project_id,
            expected_status=expected_status,
        )


class EmailDeliveryError(Exception):
    """Delivery to a single recipient failed."""

    def __init__(
        self,
        message: str,
        recipient: str | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.recipient = recipient
        self.status_code = status_code
        self.response_data = response_data or {}
