# app/models/api/status_request.py
"""
Project status API request models.
Used by routes for input validation.
"""

from pydantic import BaseModel, Field


class StatusUpdateRequest(BaseModel):
    """Request for changing a project's status."""

    status: int = Field(..., ge=0, description="Target status code from the status catalog")
    expected_status: int | None = Field(
        default=None,
        ge=0,
        description="Only apply the change if the project currently holds this status",
    )


class StatusPreviewRequest(BaseModel):
    """Request for rendering a status change without persisting or sending it."""

    status: int = Field(..., ge=0, description="Status code to preview")
    role: str | None = Field(
        default=None, description="Viewer role whose templates are rendered (default: caller's)"
    )
