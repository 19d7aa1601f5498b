"""
Email delivery client for the Resend HTTP API.

Sends one message per call, wrapped in the shared HTML layout. Transient
failures (429, 5xx and network errors) are retried with exponential backoff;
anything else, or a transient failure that outlives the retry budget, raises
EmailDeliveryError for that recipient.
"""

import asyncio
import re

import httpx

from app.infrastructure.observability.logging import get_logger

from ..domain.errors import EmailDeliveryError
from ..domain.models import CompanyInfo, NotificationJob

logger = get_logger(__name__)

RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

_TAG_PATTERN = re.compile(r"<[^>]*>")
_SLOT_PATTERN = re.compile(r"\{\{(LOGO|CONTENT|BUTTON_LINK|BUTTON_TEXT|PRIMARY_COLOR|FOOTER)\}\}")

EMAIL_LAYOUT = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
  </head>
  <body style="margin:0;padding:0;background-color:#f3f4f6;font-family:Arial,Helvetica,sans-serif;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
      <tr>
        <td align="center" style="padding:32px 16px;">
          <table role="presentation" width="600" cellpadding="0" cellspacing="0"
                 style="background-color:#ffffff;border-radius:8px;">
            <tr>
              <td style="padding:24px 32px;border-bottom:1px solid #e5e7eb;">
                {{LOGO}}
              </td>
            </tr>
            <tr>
              <td style="padding:32px;color:#111827;font-size:15px;line-height:1.6;">
                {{CONTENT}}
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:0 32px 32px;">
                <a href="{{BUTTON_LINK}}"
                   style="display:inline-block;background-color:{{PRIMARY_COLOR}};color:#ffffff;padding:12px 24px;text-decoration:none;border-radius:8px;font-weight:600;">
                  {{BUTTON_TEXT}}
                </a>
              </td>
            </tr>
            <tr>
              <td style="padding:16px 32px;color:#6b7280;font-size:12px;border-top:1px solid #e5e7eb;">
                {{FOOTER}}
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
"""


def strip_tags(value: str) -> str:
    return _TAG_PATTERN.sub("", value or "").strip()


def render_email_html(job: NotificationJob, company: CompanyInfo) -> str:
    """Fill the layout slots. Content is inserted as-is, it is already HTML."""
    logo = (
        f'<img src="{company.logo_url}" alt="{company.name}" height="28">'
        if company.logo_url
        else f"<strong>{company.name}</strong>"
    )
    footer = " &middot; ".join(
        part for part in (company.name, company.address, company.phone) if part
    )
    color = company.primary_color or "#3b82f6"
    if not color.startswith("#"):
        color = f"#{color}"

    slots = {
        "LOGO": logo,
        "CONTENT": job.body_html,
        "BUTTON_LINK": job.button_link,
        "BUTTON_TEXT": job.button_text,
        "PRIMARY_COLOR": color,
        "FOOTER": footer,
    }
    # one pass over the layout only; slot values are never re-scanned
    return _SLOT_PATTERN.sub(lambda match: slots[match.group(1)] or "", EMAIL_LAYOUT)


class ResendEmailClient:
    """
    Async client for POST /emails on the Resend API.

    Owns one httpx.AsyncClient; call close() on shutdown.
    """

    def __init__(
        self,
        api_key: str | None,
        from_email: str | None,
        from_name: str,
        company: CompanyInfo,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 15.0,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.company = company
        self.api_url = api_url
        self.max_retries = max(1, max_retries)
        self.backoff_base = backoff_base
        self._client = http_client or self._create_client(timeout)

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.from_email)

    def _create_client(self, timeout: float) -> httpx.AsyncClient:
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        return httpx.AsyncClient(timeout=httpx.Timeout(timeout), limits=limits)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def build_payload(self, job: NotificationJob) -> dict:
        headers = {}
        # correlation headers let the delivery webhook find the project again
        if not job.skip_tracking:
            if job.project_id is not None:
                headers["X-Project-Id"] = str(job.project_id)
            if job.status_code is not None:
                headers["X-Project-Status"] = str(job.status_code)

        payload = {
            "from": f"{self.from_name} <{self.from_email}>",
            "to": job.recipient_email,
            "subject": strip_tags(job.subject),
            "html": render_email_html(job, self.company),
            "text": strip_tags(job.body_html),
            "track_links": not job.skip_tracking,
            "track_opens": not job.skip_tracking,
        }
        if headers:
            payload["headers"] = headers
        return payload

    async def _post_with_retry(self, payload: dict) -> httpx.Response:
        """POST with retry/backoff on transient statuses and network errors."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self._client.post(self.api_url, json=payload, headers=headers)
                if response.status_code in RETRY_STATUS_CODES and attempt < self.max_retries:
                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    logger.warning(
                        "Email API transient status, retrying",
                        status_code=response.status_code,
                        attempt=attempt,
                        backoff_seconds=backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                return response

            except httpx.RequestError as e:
                if attempt >= self.max_retries:
                    raise
                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning(
                    "Email API request error, retrying",
                    attempt=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)

        raise RuntimeError("Email API retry loop exhausted")

    async def send(self, job: NotificationJob) -> str | None:
        """
        Deliver one notification.

        Returns:
            Provider message id, when the API returns one

        Raises:
            EmailDeliveryError: configuration missing, request failed or rejected
        """
        if not self.configured:
            raise EmailDeliveryError(
                "Email delivery not configured (EMAIL_API_KEY / FROM_EMAIL)",
                recipient=job.recipient_email,
            )

        payload = self.build_payload(job)

        try:
            response = await self._post_with_retry(payload)
        except httpx.RequestError as e:
            raise EmailDeliveryError(
                f"Email API request failed: {type(e).__name__}: {e}",
                recipient=job.recipient_email,
            ) from e

        if response.is_success:
            try:
                data = response.json() if response.text else {}
            except ValueError:
                data = {}
            message_id = data.get("id") if isinstance(data, dict) else None
            logger.info(
                "Email delivered",
                recipient=job.recipient_email,
                message_id=message_id,
                project_id=job.project_id,
            )
            return message_id

        try:
            error_data = response.json() if response.text else {}
        except ValueError:
            error_data = {"message": response.text}

        message = error_data.get("message") or f"HTTP {response.status_code}"
        logger.error(
            "Email API rejected message",
            recipient=job.recipient_email,
            status_code=response.status_code,
            error=message,
        )
        raise EmailDeliveryError(
            f"Email API error ({response.status_code}): {message}",
            recipient=job.recipient_email,
            status_code=response.status_code,
            response_data=error_data,
        )
