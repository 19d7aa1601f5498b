# app/models/api/status_response.py
"""
Project status API response models.
Used by routes for output formatting.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ProjectSummaryResponse(BaseModel):
    """The project as it stands after a status change."""

    id: int = Field(..., description="Project ID")
    title: str | None = Field(None, description="Project title")
    address: str | None = Field(None, description="Project address")
    status: int | None = Field(None, description="Current status code")
    updated_at: datetime | None = Field(None, description="When the project was last updated")


class NotificationFailureResponse(BaseModel):
    recipient: str = Field(..., description="Recipient email address")
    reason: str = Field(..., description="Why delivery failed")


class NotificationSummaryResponse(BaseModel):
    """Outcome of the notification fan-out."""

    attempted: int = Field(..., description="Number of recipients attempted")
    sent: int = Field(..., description="Number of recipients delivered")
    failed: list[NotificationFailureResponse] = Field(
        default_factory=list, description="Per-recipient failures"
    )


class StatusUpdateResponse(BaseModel):
    """Response for a status change."""

    success: bool = Field(..., description="Whether the status was persisted")
    project: ProjectSummaryResponse
    old_status: int | None = Field(None, description="Status before the change")
    new_status: int = Field(..., description="Status after the change")
    status_persisted: bool = Field(..., description="Whether the new status was written")
    notifications: NotificationSummaryResponse
    modal_message: str = Field(default="", description="Message to show the caller")
    redirect_url: str | None = Field(None, description="Where to send the caller afterwards")


class StatusOptionResponse(BaseModel):
    value: str = Field(..., description="Option value (status code)")
    label: str = Field(..., description="Option label (status name)")


class StatusViewResponse(BaseModel):
    """One status catalog entry as seen by a role."""

    status_code: int = Field(..., description="Status code")
    status_name: str = Field(..., description="Role-specific status name")
    status_tab: str | None = Field(None, description="Dashboard tab the status belongs to")
    status_slug: str = Field(..., description="URL-safe status name")
    status_color: str | None = Field(None, description="Display color")
    est_time: str = Field(default="", description="Estimated time in this status")
    select_option: StatusOptionResponse


class StatusListResponse(BaseModel):
    """Response for listing the status catalog."""

    role: str = Field(..., description="Role the names and tabs were selected for")
    statuses: list[StatusViewResponse] = Field(..., description="Catalog entries")
    total_count: int = Field(..., description="Number of statuses")


class StatusEntryResponse(BaseModel):
    """A full status catalog entry (admin and staff only)."""

    status_code: int
    admin_status_name: str = ""
    client_status_name: str = ""
    admin_email_subject: str = ""
    admin_email_content: str = ""
    client_email_subject: str = ""
    client_email_content: str = ""
    notify_roles: list[str] = Field(default_factory=list)
    button_text: str = ""
    button_link: str = ""
    est_time: str = ""
    status_color: str | None = None
    admin_status_tab: str | None = None
    client_status_tab: str | None = None
    modal_admin: str | None = None
    modal_client: str | None = None
    modal_auto_redirect_admin: str | None = None
    modal_auto_redirect_client: str | None = None


class StatusPreviewResponse(BaseModel):
    """Rendered status change for one viewer role; nothing written or sent."""

    role: str = Field(..., description="Viewer role the preview was rendered for")
    status_name: str
    subject: str
    message: str
    button_text: str
    button_link: str
    recipients: list[str] = Field(..., description="Who would be notified")
    modal_message: str = ""
    redirect_url: str | None = None
    placeholders: dict[str, str] = Field(
        default_factory=dict, description="Resolved value of every known placeholder"
    )
