"""
Tests for project context aggregation.
"""

import pytest

from app.features.status_notifications.domain.errors import (
    ProfileNotFound,
    ProjectNotFound,
    StatusNotFound,
)
from app.features.status_notifications.domain.models import CompanyInfo, Profile
from app.features.status_notifications.pipeline import StatusDataAggregator
from tests.fakes import (
    BASE_URL,
    FakeProfileRepository,
    FakeProjectRepository,
    FakeStatusCatalogRepository,
)


@pytest.fixture
def build_aggregator(project, author, staff, admins, status_entry):
    def _build(projects=None, profiles=None, entries=None):
        return StatusDataAggregator(
            projects=FakeProjectRepository([project] if projects is None else projects),
            profiles=FakeProfileRepository(
                [author, staff, *admins] if profiles is None else profiles
            ),
            statuses=FakeStatusCatalogRepository([status_entry] if entries is None else entries),
            company=CompanyInfo(name="CAPCo"),
            base_url=BASE_URL,
        )

    return _build


@pytest.mark.asyncio
async def test_aggregate_builds_full_context(build_aggregator):
    ctx = await build_aggregator().aggregate(42, 30)

    assert ctx.project.id == 42
    assert ctx.author_profile.email == "client@example.com"
    assert ctx.assigned_staff_profile.email == "staff@capco.example"
    assert ctx.status_entry.status_code == 30
    assert [p.id for p in ctx.admin_profiles] == ["admin-1", "admin-2"]
    assert ctx.company.name == "CAPCo"
    assert ctx.base_url == BASE_URL


@pytest.mark.asyncio
async def test_missing_project_fails_closed(build_aggregator):
    with pytest.raises(ProjectNotFound) as exc_info:
        await build_aggregator().aggregate(999, 30)

    assert exc_info.value.project_id == 999
    assert exc_info.value.http_status == 404


@pytest.mark.asyncio
async def test_missing_status_entry(build_aggregator):
    with pytest.raises(StatusNotFound) as exc_info:
        await build_aggregator().aggregate(42, 999)

    assert exc_info.value.status_code == 999


@pytest.mark.asyncio
async def test_missing_author_profile(build_aggregator, staff):
    with pytest.raises(ProfileNotFound) as exc_info:
        await build_aggregator(profiles=[staff]).aggregate(42, 30)

    assert exc_info.value.profile_id == "author-1"


@pytest.mark.asyncio
async def test_author_without_email(build_aggregator):
    author = Profile(id="author-1", email=None, company_name="Acme")

    with pytest.raises(ProfileNotFound) as exc_info:
        await build_aggregator(profiles=[author]).aggregate(42, 30)

    assert exc_info.value.reason == "no email"


@pytest.mark.asyncio
async def test_project_without_author(build_aggregator, project):
    project.author_id = None

    with pytest.raises(ProfileNotFound):
        await build_aggregator().aggregate(42, 30)


@pytest.mark.asyncio
async def test_missing_staff_is_optional(build_aggregator, author, admins):
    ctx = await build_aggregator(profiles=[author, *admins]).aggregate(42, 30)

    assert ctx.assigned_staff_profile is None


@pytest.mark.asyncio
async def test_admins_loaded_only_when_notified(build_aggregator, status_entry):
    status_entry.notify_roles = ["client"]

    ctx = await build_aggregator().aggregate(42, 30)

    assert ctx.admin_profiles == []
