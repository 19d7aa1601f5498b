"""
Services for status notifications: orchestration, catalog views, email
delivery, dispatch and activity logging.
"""

from .activity_logger import ProjectActivityLogger
from .dispatcher import NotificationDispatcher
from .email_client import ResendEmailClient
from .status_catalog_service import RoleStatusView, StatusCatalogService, status_slug
from .status_update_service import StatusUpdateService

__all__ = [
    "NotificationDispatcher",
    "ProjectActivityLogger",
    "ResendEmailClient",
    "RoleStatusView",
    "StatusCatalogService",
    "StatusUpdateService",
    "status_slug",
]
