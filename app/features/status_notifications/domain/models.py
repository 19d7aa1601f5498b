"""
Domain models for project status notifications.

Plain dataclasses describing the rows the repositories load and the values
the pipeline passes between aggregation, processing and dispatch. They carry
no I/O so every pipeline stage can be exercised with hand-built instances.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Closed set of user roles. Use Role.parse() to canonicalise raw values."""

    ADMIN = "Admin"
    STAFF = "Staff"
    CLIENT = "Client"

    @classmethod
    def parse(cls, value: "str | Role | None") -> "Role":
        """Case-insensitive lookup; unknown or missing values map to CLIENT."""
        if isinstance(value, Role):
            return value
        normalized = (value or "").strip().lower()
        for role in cls:
            if role.value.lower() == normalized:
                return role
        return cls.CLIENT

    @property
    def is_admin_or_staff(self) -> bool:
        return self in (Role.ADMIN, Role.STAFF)


class NotifyRole(str, Enum):
    """Recipient groups a status catalog entry may list in notify_roles."""

    ADMIN = "admin"
    STAFF = "staff"
    CLIENT = "client"
    AUTHOR = "author"

    @classmethod
    def parse(cls, value: str) -> "NotifyRole | None":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None

    @property
    def audience(self) -> Role:
        """Which template set a recipient in this group reads."""
        if self in (NotifyRole.ADMIN, NotifyRole.STAFF):
            return Role.ADMIN
        return Role.CLIENT


@dataclass(slots=True)
class StatusCatalogEntry:
    """One project_statuses row."""

    status_code: int
    admin_status_name: str = ""
    client_status_name: str = ""
    admin_email_subject: str = ""
    admin_email_content: str = ""
    client_email_subject: str = ""
    client_email_content: str = ""
    notify_roles: list[str] = field(default_factory=list)
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

    def status_name_for(self, role: Role) -> str:
        return self.admin_status_name if role.is_admin_or_staff else self.client_status_name

    def email_subject_for(self, role: Role) -> str:
        return self.admin_email_subject if role.is_admin_or_staff else self.client_email_subject

    def email_content_for(self, role: Role) -> str:
        return self.admin_email_content if role.is_admin_or_staff else self.client_email_content

    def status_tab_for(self, role: Role) -> str | None:
        return self.admin_status_tab if role.is_admin_or_staff else self.client_status_tab

    def modal_for(self, role: Role) -> str | None:
        return self.modal_admin if role.is_admin_or_staff else self.modal_client

    def redirect_for(self, role: Role) -> str | None:
        if role.is_admin_or_staff:
            return self.modal_auto_redirect_admin
        return self.modal_auto_redirect_client


@dataclass(slots=True)
class Project:
    id: int
    title: str | None = None
    address: str | None = None
    author_id: str | None = None
    assigned_to_id: str | None = None
    status: int | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class Profile:
    """profiles row merged with the auth provider's email."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    role: Role = Role.CLIENT

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(slots=True)
class CompanyInfo:
    name: str = ""
    address: str = ""
    phone: str = ""
    logo_url: str = ""
    primary_color: str = ""


@dataclass(slots=True)
class ProjectContext:
    """Everything placeholder substitution and recipient derivation read."""

    project: Project
    author_profile: Profile
    status_entry: StatusCatalogEntry
    assigned_staff_profile: Profile | None = None
    company: CompanyInfo = field(default_factory=CompanyInfo)
    base_url: str = ""
    admin_profiles: list[Profile] = field(default_factory=list)


@dataclass(slots=True)
class NotificationJob:
    recipient_email: str
    subject: str
    body_html: str
    button_text: str = ""
    button_link: str = ""
    skip_tracking: bool = False
    project_id: int | None = None
    status_code: int | None = None


@dataclass(slots=True)
class ProcessedStatus:
    """Output of the status processor for one audience."""

    role: Role
    status_name: str
    subject: str
    message: str
    button_text: str
    button_link: str
    recipients: list[str]
    jobs: list[NotificationJob]
    modal_message: str = ""
    redirect_url: str | None = None


@dataclass(slots=True)
class DispatchFailure:
    recipient: str
    reason: str


@dataclass(slots=True)
class DispatchResult:
    sent: int = 0
    failed: list[DispatchFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.sent + len(self.failed)


@dataclass(slots=True)
class StatusUpdateResult:
    """What a status change reports: persistence and notification outcomes separately."""

    project: Project
    old_status: int | None
    new_status: int
    status_persisted: bool
    notifications: DispatchResult
    modal_message: str = ""
    redirect_url: str | None = None
    processed: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Actor:
    """The authenticated user performing an operation."""

    user_id: str
    role: Role = Role.CLIENT
    email: str | None = None
