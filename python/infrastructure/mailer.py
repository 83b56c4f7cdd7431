"""
Transactional email over SMTP (aiosmtplib).

Sending is best effort: failures are logged and reported as False,
never raised to the request that triggered them.
"""

import html
import re
from datetime import date
from email.message import EmailMessage
from typing import Any, Dict, Optional

import aiosmtplib

from core.config import settings
from core.logging import get_logger

logger = get_logger(__name__)


class Mailer:
    """SMTP sender with text + HTML multipart messages."""

    def __init__(
        self,
        host: str = None,
        port: int = None,
        username: str = None,
        password: str = None,
        use_tls: bool = None,
        from_email: str = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username or settings.smtp_username
        self.password = password or settings.smtp_password
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls
        self.from_email = from_email or settings.email_from

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.username and self.password)

    def build_message(self, to: str, subject: str, html_content: str, text_content: str = None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text_content or _html_to_text(html_content), charset="utf-8")
        msg.add_alternative(html_content, subtype="html", charset="utf-8")
        return msg

    async def send(self, to: str, subject: str, html_content: str, text_content: str = None) -> bool:
        if not self.enabled:
            logger.info(f"Email disabled, skipping '{subject}' to {to}")
            return False

        msg = self.build_message(to, subject, html_content, text_content)
        try:
            async with aiosmtplib.SMTP(
                hostname=self.host,
                port=self.port,
                start_tls=self.use_tls,
                timeout=20,
            ) as smtp:
                await smtp.login(self.username, self.password)
                await smtp.send_message(msg)
        except aiosmtplib.SMTPException as e:
            logger.error(f"SMTP send failed to {to}: {e}", exc_info=True)
            return False
        except OSError as e:
            logger.error(f"SMTP connection failed: {e}")
            return False

        logger.info(f"Email '{subject}' sent to {to}")
        return True

    async def send_booking_notification(self, to: str, details: Dict[str, Any]) -> bool:
        """Tell a gym about a newly paid booking."""
        subject = f"New Booking at {details.get('gym_name')}!"
        return await self.send(to, subject, render_booking_notification(details))


def _format_date(value: Any) -> str:
    if isinstance(value, date):
        return value.strftime("%a %b %d %Y")
    return str(value or "")


def render_booking_notification(details: Dict[str, Any]) -> str:
    esc = lambda v: html.escape(str(v)) if v is not None else ""
    trainer = details.get("trainer_name")
    trainer_row = f"<p><strong>Trainer:</strong> {esc(trainer)}</p>" if trainer else ""

    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #13ec5b;">New Booking Confirmed</h2>
  <p>You have received a new booking for <strong>{esc(details.get('gym_name'))}</strong>.</p>
  <div style="background-color: #f9f9f9; padding: 15px; border-radius: 5px; margin: 20px 0;">
    <h3 style="margin-top: 0;">Booking Details</h3>
    <p><strong>Customer:</strong> {esc(details.get('customer_name'))}</p>
    <p><strong>Phone:</strong> {esc(details.get('customer_phone') or 'N/A')}</p>
    <p><strong>Service:</strong> {esc(details.get('service_name') or 'Service')}</p>
    {trainer_row}
    <p><strong>Date:</strong> {esc(_format_date(details.get('booking_date')))}</p>
    <p><strong>Time:</strong> {esc(details.get('start_time') or '-')} ({esc(details.get('duration') or 1)} Hours)</p>
    <p><strong>Amount Paid:</strong> &#8377;{esc(details.get('total_amount'))}</p>
  </div>
  <p>Please ensure the facility is ready for the customer.</p>
</div>
""".strip()


def _html_to_text(content: str) -> str:
    text = re.sub(r"<[^>]+>", "", content)
    text = html.unescape(text)
    return re.sub(r"\n\s*\n+", "\n\n", text).strip()


# Singleton instance
_mailer: Optional[Mailer] = None


def get_mailer() -> Mailer:
    global _mailer
    if _mailer is None:
        _mailer = Mailer()
    return _mailer
