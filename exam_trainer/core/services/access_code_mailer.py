"""Self-service delivery of access codes by e-mail.

Students who lost their code enter their e-mail address on the login page.
The mailer looks up the newest active code registered for that address and
sends it through the Resend HTTP API. The caller never learns whether the
address was known, rate-limited or whether the mail went out.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from exam_trainer.core.errors import TrainerError
from exam_trainer.core.markdown_renderer import MarkdownRenderer, renderer
from exam_trainer.core.models import AccessCode
from exam_trainer.core.services.data_store import DataStore
from exam_trainer.core.services.rate_limiter import SlidingWindowLimiter

logger = logging.getLogger(__name__)

MAIL_SUBJECT = "Dein Zugangscode für den DZKB Prüfungstrainer"

_MAIL_TEMPLATE = """\
**Hallo {name},**

dein persönlicher Zugangscode für den Prüfungstrainer lautet:

`{code}`
{link}
_Wenn du diese E-Mail nicht erwartet hast, kannst du sie ignorieren._
"""


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def build_mail_body(record: AccessCode, app_url: str = "", markdown: MarkdownRenderer = renderer) -> str:
    """Render the HTML body of the access-code mail."""
    link = f"\n[Zum Prüfungstrainer]({app_url})\n" if app_url else ""
    source = _MAIL_TEMPLATE.format(
        name=(record.student_name or "").strip(),
        code=record.code,
        link=link,
    )
    return markdown.render_document(source, title="DZKB Prüfungstrainer - Zugangscode")


class AccessCodeMailer:
    """Rate-limited lookup and delivery of access codes."""

    def __init__(
        self,
        store: DataStore,
        api_url: str,
        api_key: str | None,
        sender: str,
        app_url: str = "",
        email_limiter: SlidingWindowLimiter | None = None,
        ip_limiter: SlidingWindowLimiter | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._store = store
        self._api_url = api_url
        self._api_key = api_key
        self._sender = sender
        self._app_url = app_url
        self._email_limiter = email_limiter or SlidingWindowLimiter(3, 15 * 60)
        self._ip_limiter = ip_limiter or SlidingWindowLimiter(6, 15 * 60)
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._sender)

    def request_access_code(self, email: str | None, client_ip: str | None = None) -> None:
        address = normalize_email(email)
        if not address:
            return

        # Both windows record the attempt, even when the other one refuses it.
        email_allowed = self._email_limiter.hit(address)
        ip_allowed = self._ip_limiter.hit(client_ip) if client_ip else True
        if not (email_allowed and ip_allowed):
            logger.info("Access code request rate-limited (ip=%s)", client_ip or "-")
            return

        try:
            record = self._store.find_active_code_by_email(address)
        except TrainerError as exc:
            logger.error("Looking up the access code failed: %s", exc)
            return
        if record is None:
            logger.info("Access code request for an unknown or inactive address")
            return
        self._deliver(record)

    def _deliver(self, record: AccessCode) -> None:
        if not self.is_configured:
            logger.warning("Mail delivery is not configured; code %s was not sent", record.id)
            return

        payload = {
            "from": self._sender,
            "to": record.email,
            "subject": MAIL_SUBJECT,
            "html": build_mail_body(record, self._app_url),
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._api_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Sending access code %s failed: %s", record.id, exc)
            self._record_status(record, "failed", str(exc)[:500])
            return
        logger.info("Access code %s sent", record.id)
        self._record_status(record, "sent", None)

    def _record_status(self, record: AccessCode, status: str, error: str | None) -> None:
        try:
            self._store.update_access_code(
                record.id,
                sent_at=datetime.now(timezone.utc),
                send_status=status,
                send_error=error,
            )
        except TrainerError as exc:
            logger.warning("Could not record send status for code %s: %s", record.id, exc)
