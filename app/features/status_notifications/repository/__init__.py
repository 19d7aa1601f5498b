"""
Repositories for projects, profiles, the status catalog and activity logs.
"""

from .activity_repository import ProjectActivityRepository
from .profile_repository import ProfileRepository
from .project_repository import ProjectRepository
from .status_catalog_repository import StatusCatalogRepository

__all__ = [
    "ProfileRepository",
    "ProjectActivityRepository",
    "ProjectRepository",
    "StatusCatalogRepository",
]
