"""
Tests for the Resend email client.
"""

import json

import httpx
import pytest

from app.features.status_notifications.domain.errors import EmailDeliveryError
from app.features.status_notifications.domain.models import CompanyInfo, NotificationJob
from app.features.status_notifications.services.email_client import (
    ResendEmailClient,
    render_email_html,
    strip_tags,
)

COMPANY = CompanyInfo(name="CAPCo", address="1 Main St", phone="555-0100", primary_color="ff0000")


def _job(**overrides):
    values = {
        "recipient_email": "client@example.com",
        "subject": "<b>Update</b> on 1 Oak Ave",
        "body_html": "<p>Hi Acme</p>",
        "button_text": "View Project",
        "button_link": "https://app.example.com/project/42",
        "project_id": 42,
        "status_code": 30,
    }
    values.update(overrides)
    return NotificationJob(**values)


def _client(handler, **overrides):
    values = {
        "api_key": "re_test",
        "from_email": "noreply@capco.example",
        "from_name": "CAPCo",
        "company": COMPANY,
        "max_retries": 3,
        "backoff_base": 0,
        "http_client": httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    }
    values.update(overrides)
    return ResendEmailClient(**values)


def test_strip_tags():
    assert strip_tags("<b>Hello</b> <i>there</i>") == "Hello there"
    assert strip_tags(None) == ""


def test_render_email_html_fills_layout():
    html = render_email_html(_job(), COMPANY)

    assert "<p>Hi Acme</p>" in html
    assert 'href="https://app.example.com/project/42"' in html
    assert "background-color:#ff0000" in html
    assert "CAPCo &middot; 1 Main St &middot; 555-0100" in html
    assert "{{" not in html


def test_client_payload_is_tracked():
    client = _client(lambda request: httpx.Response(200, json={"id": "x"}))

    payload = client.build_payload(_job())

    assert payload["from"] == "CAPCo <noreply@capco.example>"
    assert payload["to"] == "client@example.com"
    assert payload["subject"] == "Update on 1 Oak Ave"
    assert payload["text"] == "Hi Acme"
    assert payload["track_links"] is True
    assert payload["track_opens"] is True
    assert payload["headers"] == {"X-Project-Id": "42", "X-Project-Status": "30"}


def test_internal_payload_skips_tracking():
    client = _client(lambda request: httpx.Response(200, json={"id": "x"}))

    payload = client.build_payload(_job(skip_tracking=True))

    assert payload["track_links"] is False
    assert payload["track_opens"] is False
    assert "headers" not in payload


@pytest.mark.asyncio
async def test_send_returns_message_id():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "msg_123"})

    message_id = await _client(handler).send(_job())

    assert message_id == "msg_123"
    assert captured["auth"] == "Bearer re_test"
    assert captured["body"]["to"] == "client@example.com"


@pytest.mark.asyncio
async def test_transient_status_is_retried():
    calls = {"count": 0}

    def handler(request):
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503, json={"message": "unavailable"})
        return httpx.Response(200, json={"id": "msg_ok"})

    assert await _client(handler).send(_job()) == "msg_ok"
    assert calls["count"] == 3


@pytest.mark.asyncio
async def test_transient_status_exhausts_retries():
    calls = {"count": 0}

    def handler(request):
        calls["count"] += 1
        return httpx.Response(429, json={"message": "rate limited"})

    with pytest.raises(EmailDeliveryError) as exc_info:
        await _client(handler, max_retries=2).send(_job())

    assert calls["count"] == 2
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_client_error_is_not_retried():
    calls = {"count": 0}

    def handler(request):
        calls["count"] += 1
        return httpx.Response(422, json={"message": "Invalid `to` field"})

    with pytest.raises(EmailDeliveryError) as exc_info:
        await _client(handler).send(_job())

    assert calls["count"] == 1
    assert exc_info.value.recipient == "client@example.com"
    assert "Invalid `to` field" in str(exc_info.value)


@pytest.mark.asyncio
async def test_network_error_retried_then_raised():
    calls = {"count": 0}

    def handler(request):
        calls["count"] += 1
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EmailDeliveryError, match="ConnectError"):
        await _client(handler).send(_job())

    assert calls["count"] == 3


@pytest.mark.asyncio
async def test_unconfigured_client_raises_without_request():
    calls = {"count": 0}

    def handler(request):
        calls["count"] += 1
        return httpx.Response(200, json={"id": "x"})

    client = _client(handler, api_key=None)

    assert client.configured is False
    with pytest.raises(EmailDeliveryError, match="not configured"):
        await client.send(_job())
    assert calls["count"] == 0


def test_render_email_html_keeps_slot_names_in_content_verbatim():
    job = _job(body_html="Literal {{BUTTON_TEXT}} and {{FOOTER}} tokens", button_text="Open")

    html = render_email_html(job, COMPANY)

    assert "Literal {{BUTTON_TEXT}} and {{FOOTER}} tokens" in html
    assert html.count("{{BUTTON_TEXT}}") == 1
    assert html.count("{{FOOTER}}") == 1
    assert "Open\n" in html
    assert "CAPCo &middot; 1 Main St &middot; 555-0100" in html


@pytest.mark.asyncio
async def test_send_accepts_non_object_json_body():
    message_id = await _client(lambda request: httpx.Response(200, json=["queued"])).send(_job())

    assert message_id is None
