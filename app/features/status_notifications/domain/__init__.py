"""
Domain subpackage for status notifications.
"""

from .errors import (
    EmailDeliveryError,
    NotFoundError,
    ProfileNotFound,
    ProjectNotFound,
    StatusConflict,
    StatusNotFound,
    StatusPipelineError,
)
from .models import (
    Actor,
    CompanyInfo,
    DispatchFailure,
    DispatchResult,
    NotificationJob,
    NotifyRole,
    ProcessedStatus,
    Profile,
    Project,
    ProjectContext,
    Role,
    StatusCatalogEntry,
    StatusUpdateResult,
)

__all__ = [
    "Actor",
    "CompanyInfo",
    "DispatchFailure",
    "DispatchResult",
    "EmailDeliveryError",
    "NotFoundError",
    "NotificationJob",
    "NotifyRole",
    "ProcessedStatus",
    "Profile",
    "ProfileNotFound",
    "Project",
    "ProjectContext",
    "ProjectNotFound",
    "Role",
    "StatusCatalogEntry",
    "StatusConflict",
    "StatusNotFound",
    "StatusPipelineError",
    "StatusUpdateResult",
]
