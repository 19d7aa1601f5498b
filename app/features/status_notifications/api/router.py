"""
Project status routes.

Status changes, catalog reads and message previews. Every endpoint needs a
valid Supabase JWT; the caller's role comes from their profile row, not from
the token.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.auth.verify import auth_dependency
from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.api.status_request import StatusPreviewRequest, StatusUpdateRequest
from app.models.api.status_response import (
    NotificationFailureResponse,
    NotificationSummaryResponse,
    ProjectSummaryResponse,
    StatusEntryResponse,
    StatusListResponse,
    StatusOptionResponse,
    StatusPreviewResponse,
    StatusUpdateResponse,
    StatusViewResponse,
)

from ..domain.errors import StatusPipelineError
from ..domain.models import Actor, Role
from ..repository import ProfileRepository
from ..services import StatusCatalogService, StatusUpdateService

router = APIRouter(tags=["project-status"])
logger = get_logger(__name__)


def get_status_update_service(request: Request) -> StatusUpdateService:
    return request.app.state.status_update_service


def get_status_catalog_service(request: Request) -> StatusCatalogService:
    return request.app.state.status_catalog_service


def get_profile_repository(request: Request) -> ProfileRepository:
    return request.app.state.profile_repository


async def get_actor(
    claims: dict = Depends(auth_dependency),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> Actor:
    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    try:
        profile = await profiles.get_profile(user_id)
    except DatabaseError as e:
        logger.error("Actor profile lookup failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable"
        ) from e

    if profile is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User profile not found")

    return Actor(user_id=user_id, role=profile.role, email=profile.email or claims.get("email"))


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, StatusPipelineError):
        return HTTPException(status_code=e.http_status, detail=e.message)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable"
    )


@router.post("/projects/{project_id}/status", response_model=StatusUpdateResponse)
async def update_project_status(
    project_id: int,
    body: StatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: StatusUpdateService = Depends(get_status_update_service),
):
    """Persist a new status and notify its recipients."""
    try:
        result = await service.update_status(
            project_id, body.status, actor, expected_status=body.expected_status
        )
    except (StatusPipelineError, DatabaseError) as e:
        logger.warning(
            "Status update rejected",
            project_id=project_id,
            new_status=body.status,
            user_id=actor.user_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise _to_http_error(e) from e

    project = result.project
    return StatusUpdateResponse(
        success=result.status_persisted,
        project=ProjectSummaryResponse(
            id=project.id,
            title=project.title,
            address=project.address,
            status=project.status,
            updated_at=project.updated_at,
        ),
        old_status=result.old_status,
        new_status=result.new_status,
        status_persisted=result.status_persisted,
        notifications=NotificationSummaryResponse(
            attempted=result.notifications.attempted,
            sent=result.notifications.sent,
            failed=[
                NotificationFailureResponse(recipient=f.recipient, reason=f.reason)
                for f in result.notifications.failed
            ],
        ),
        modal_message=result.modal_message,
        redirect_url=result.redirect_url,
    )


@router.post("/projects/{project_id}/status/preview", response_model=StatusPreviewResponse)
async def preview_project_status(
    project_id: int,
    body: StatusPreviewRequest,
    actor: Actor = Depends(get_actor),
    service: StatusUpdateService = Depends(get_status_update_service),
):
    """Render a status change without writing or sending anything."""
    viewer_role = None
    if body.role is not None:
        # clients only ever see their own templates
        if not actor.role.is_admin_or_staff:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only admin or staff may preview other roles",
            )
        viewer_role = Role.parse(body.role)

    try:
        processed, placeholders = await service.preview(
            project_id, body.status, actor, viewer_role
        )
    except (StatusPipelineError, DatabaseError) as e:
        raise _to_http_error(e) from e

    return StatusPreviewResponse(
        role=processed.role.value,
        status_name=processed.status_name,
        subject=processed.subject,
        message=processed.message,
        button_text=processed.button_text,
        button_link=processed.button_link,
        recipients=processed.recipients,
        modal_message=processed.modal_message,
        redirect_url=processed.redirect_url,
        placeholders=placeholders,
    )


@router.get("/project-statuses", response_model=StatusListResponse)
async def list_project_statuses(
    actor: Actor = Depends(get_actor),
    catalog: StatusCatalogService = Depends(get_status_catalog_service),
):
    """Status catalog with names and tabs for the caller's role."""
    try:
        views = await catalog.list_for_role(actor.role)
    except DatabaseError as e:
        raise _to_http_error(e) from e

    statuses = [
        StatusViewResponse(
            status_code=view.status_code,
            status_name=view.status_name,
            status_tab=view.status_tab,
            status_slug=view.status_slug,
            status_color=view.status_color,
            est_time=view.est_time,
            select_option=StatusOptionResponse(**view.select_option),
        )
        for view in views
    ]
    return StatusListResponse(role=actor.role.value, statuses=statuses, total_count=len(statuses))


@router.get("/project-statuses/{status_code}", response_model=StatusEntryResponse)
async def get_project_status(
    status_code: int,
    actor: Actor = Depends(get_actor),
    catalog: StatusCatalogService = Depends(get_status_catalog_service),
):
    """Full catalog entry including templates. Admin and staff only."""
    if not actor.role.is_admin_or_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin or staff only")

    try:
        entry = await catalog.get_entry(status_code)
    except (StatusPipelineError, DatabaseError) as e:
        raise _to_http_error(e) from e

    return StatusEntryResponse(
        status_code=entry.status_code,
        admin_status_name=entry.admin_status_name,
        client_status_name=entry.client_status_name,
        admin_email_subject=entry.admin_email_subject,
        admin_email_content=entry.admin_email_content,
        client_email_subject=entry.client_email_subject,
        client_email_content=entry.client_email_content,
        notify_roles=list(entry.notify_roles),
        button_text=entry.button_text,
        button_link=entry.button_link,
        est_time=entry.est_time,
        status_color=entry.status_color,
        admin_status_tab=entry.admin_status_tab,
        client_status_tab=entry.client_status_tab,
        modal_admin=entry.modal_admin,
        modal_client=entry.modal_client,
        modal_auto_redirect_admin=entry.modal_auto_redirect_admin,
        modal_auto_redirect_client=entry.modal_auto_redirect_client,
    )
