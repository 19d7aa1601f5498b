"""
Tests for row mapping and query construction in the repositories.
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from app.features.status_notifications.domain.models import Role
from app.features.status_notifications.repository import (
    ProfileRepository,
    ProjectActivityRepository,
    ProjectRepository,
    StatusCatalogRepository,
)
from app.features.status_notifications.repository import (
    activity_repository,
    profile_repository,
    project_repository,
    status_catalog_repository,
)
from app.features.status_notifications.repository.status_catalog_repository import (
    row_to_status_entry,
)


class FakePool:
    def __init__(self):
        self.conn = object()

    @asynccontextmanager
    async def connection(self):
        yield self.conn


def test_status_row_mapping_handles_nulls_and_notify_formats():
    entry = row_to_status_entry(
        {
            "status_code": "30",
            "admin_status_name": "Generating Proposal",
            "client_status_name": None,
            "notify": "admin, client,",
            "button_link": None,
        }
    )

    assert entry.status_code == 30
    assert entry.client_status_name == ""
    assert entry.notify_roles == ["admin", "client"]
    assert entry.button_link == ""

    assert row_to_status_entry({"status_code": 1, "notify": ["staff"]}).notify_roles == ["staff"]
    assert row_to_status_entry({"status_code": 1, "notify": None}).notify_roles == []


@pytest.mark.asyncio
async def test_update_status_with_expected_status(monkeypatch):
    fetch = AsyncMock(return_value={"id": 42, "author_id": "u1", "status": 30})
    monkeypatch.setattr(project_repository, "fetch_one", fetch)

    project = await ProjectRepository(FakePool()).update_status(42, 30, expected_status=20)

    query, params = fetch.await_args.args
    assert "AND status = %s" in query
    assert "RETURNING" in query
    assert params == (30, 42, 20)
    assert project.status == 30
    assert project.author_id == "u1"


@pytest.mark.asyncio
async def test_update_status_no_match_returns_none(monkeypatch):
    fetch = AsyncMock(return_value=None)
    monkeypatch.setattr(project_repository, "fetch_one", fetch)

    assert await ProjectRepository(FakePool()).update_status(42, 30) is None
    query, params = fetch.await_args.args
    assert "AND status = %s" not in query
    assert params == (30, 42)


@pytest.mark.asyncio
async def test_profile_role_is_canonicalised(monkeypatch):
    fetch = AsyncMock(return_value={"id": "u1", "email": "", "role": "ADMIN"})
    monkeypatch.setattr(profile_repository, "fetch_one", fetch)

    profile = await ProfileRepository(FakePool()).get_profile("u1")

    assert profile.role is Role.ADMIN
    assert profile.email is None


@pytest.mark.asyncio
async def test_list_profiles_by_role_matches_case_insensitively(monkeypatch):
    fetch = AsyncMock(return_value=[{"id": "a1", "email": "a@x.com", "role": "admin"}])
    monkeypatch.setattr(profile_repository, "fetch_all", fetch)

    profiles = await ProfileRepository(FakePool()).list_profiles_by_role(Role.ADMIN)

    query, params = fetch.await_args.args
    assert "lower(p.role) = lower(%s)" in query
    assert params == ("Admin",)
    assert [p.email for p in profiles] == ["a@x.com"]


@pytest.mark.asyncio
async def test_list_entries_excludes_code_zero(monkeypatch):
    fetch = AsyncMock(return_value=[{"status_code": 10}, {"status_code": 20}])
    monkeypatch.setattr(status_catalog_repository, "fetch_all", fetch)

    entries = await StatusCatalogRepository(FakePool()).list_entries()

    assert "status_code <> 0" in fetch.await_args.args[0]
    assert [e.status_code for e in entries] == [10, 20]


@pytest.mark.asyncio
async def test_activity_insert_wraps_metadata(monkeypatch):
    execute = AsyncMock(return_value=1)
    monkeypatch.setattr(activity_repository, "execute_query", execute)

    written = await ProjectActivityRepository(FakePool()).insert_entry(
        42, "statusChange", "Status changed", user_id="u1", metadata={"new_status": 30}
    )

    assert written is True
    params = execute.await_args.args[1]
    assert params[:4] == (42, "u1", "statusChange", "Status changed")
    assert params[4].obj == {"new_status": 30}
