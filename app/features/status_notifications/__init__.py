"""
Project status notifications.

Changing a project's status persists the new code, then emails every
recipient group the status catalog names, with role-specific templates and
placeholder substitution.
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as status_router  # noqa: F401
from .domain.models import Actor, ProjectContext, Role, StatusUpdateResult  # noqa: F401
from .services.status_update_service import StatusUpdateService  # noqa: F401
