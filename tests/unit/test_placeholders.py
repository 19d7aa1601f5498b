"""
Tests for {{TOKEN}} substitution.
"""

import pytest

from app.features.status_notifications.domain.models import Profile, Project, Role
from app.features.status_notifications.pipeline import placeholders
from app.features.status_notifications.pipeline.placeholders import (
    find_tokens,
    placeholder_values,
    substitute,
    unrecognized_tokens,
)


@pytest.mark.parametrize(
    "template",
    [
        "",
        "Plain text with no markers.",
        "<p>Inline <strong>HTML</strong> & entities &amp; stay</p>",
        "Single braces {PROJECT_ADDRESS} are not tokens",
    ],
)
def test_token_free_template_is_unchanged(make_context, template):
    assert substitute(template, make_context()) == template


def test_substituted_output_is_stable_on_second_pass(make_context):
    ctx = make_context()
    once = substitute("{{PROJECT_ADDRESS}} / {{COMPANY_NAME}}", ctx)

    assert substitute(once, ctx) == once


def test_project_address_resolves(make_context, project):
    project.address = "123 Main St"

    assert substitute("Address: {{PROJECT_ADDRESS}}", make_context()) == "Address: 123 Main St"


def test_address_alias_and_whitespace_inside_braces(make_context):
    assert substitute("{{ ADDRESS }}", make_context()) == "500 Harbor Blvd"


def test_null_company_name_becomes_empty_string(make_context, author):
    author.company_name = None

    result = substitute("{{CLIENT_NAME}}", make_context())

    assert result == ""
    assert "None" not in result


def test_client_full_name_trims_missing_parts(make_context):
    author = Profile(id="a", email="a@example.com", first_name="Casey", last_name=None)

    assert substitute("[{{CLIENT_FULL_NAME}}]", make_context(author_profile=author)) == "[Casey]"


def test_missing_staff_resolves_to_empty(make_context):
    ctx = make_context(assigned_staff_profile=None)

    assert substitute("{{STAFF_NAME}}|{{STAFF_EMAIL}}", ctx) == "|"


def test_status_name_follows_role(make_context):
    ctx = make_context()

    assert substitute("{{STATUS_NAME}}", ctx, Role.ADMIN) == "Generating Proposal"
    assert substitute("{{STATUS_NAME}}", ctx, Role.STAFF) == "Generating Proposal"
    assert substitute("{{STATUS_NAME}}", ctx, Role.CLIENT) == "Proposal In Progress"


def test_primary_color_is_hash_prefixed(make_context, company):
    assert substitute("{{PRIMARY_COLOR}}", make_context()) == "#3b82f6"

    company.primary_color = "#ff0000"
    assert substitute("{{PRIMARY_COLOR}}", make_context()) == "#ff0000"


def test_project_link_is_absolute_and_keeps_query(make_context):
    ctx = make_context(project=Project(id=7, author_id="author-1"))

    assert substitute("{{PROJECT_LINK}}", ctx) == "https://app.example.com/project/7"
    assert (
        substitute("{{PROJECT_LINK?tab=docs}}", ctx)
        == "https://app.example.com/project/7?tab=docs"
    )


def test_tokens_are_case_sensitive(make_context):
    result = substitute("{{project_address}}", make_context())

    assert result == "{{project_address}}"


def test_unknown_token_left_verbatim_and_warned(make_context, monkeypatch):
    warnings = []

    class RecordingLogger:
        def warning(self, event, **kw):
            warnings.append((event, kw))

    monkeypatch.setattr(placeholders, "logger", RecordingLogger())

    result = substitute("Hi {{CLIENT_FIRST_NAME}} {{NOT_A_TOKEN}}", make_context())

    assert result == "Hi Casey {{NOT_A_TOKEN}}"
    assert warnings[0][0] == "substitution_unrecognized_tokens"
    assert warnings[0][1]["tokens"] == ["NOT_A_TOKEN"]


def test_values_are_not_rescanned(make_context, author):
    author.company_name = "{{PROJECT_ADDRESS}}"

    assert substitute("{{CLIENT_NAME}}", make_context()) == "{{PROJECT_ADDRESS}}"


def test_none_template_returns_empty(make_context):
    assert substitute(None, make_context()) == ""


def test_find_and_unrecognized_tokens():
    template = "{{A_TOKEN}} {{PROJECT_ID}} {{A_TOKEN}} {{PROJECT_LINK?x=1}}"

    assert find_tokens(template) == ["A_TOKEN", "PROJECT_ID", "A_TOKEN", "PROJECT_LINK"]
    assert unrecognized_tokens(template) == ["A_TOKEN"]


def test_query_suffix_on_plain_token_left_verbatim_and_warned(make_context, monkeypatch):
    warnings = []

    class RecordingLogger:
        def warning(self, event, **kw):
            warnings.append((event, kw))

    monkeypatch.setattr(placeholders, "logger", RecordingLogger())

    result = substitute("{{CLIENT_FIRST_NAME?x=1}} / {{CLIENT_FIRST_NAME}}", make_context())

    assert result == "{{CLIENT_FIRST_NAME?x=1}} / Casey"
    assert warnings[0][1]["tokens"] == ["CLIENT_FIRST_NAME?x=1"]
    assert unrecognized_tokens("{{CLIENT_FIRST_NAME?x=1}}") == ["CLIENT_FIRST_NAME?x=1"]


def test_placeholder_values_cover_every_token(make_context):
    values = placeholder_values(make_context(), Role.CLIENT)

    assert values["PROJECT_ID"] == "42"
    assert values["CLIENT_NAME"] == "Acme Builders"
    assert values["STAFF_NAME"] == "Sam Staff"
    assert values["BASE_URL"] == "https://app.example.com"
    assert all(isinstance(value, str) for value in values.values())
