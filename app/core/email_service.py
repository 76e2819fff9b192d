import html as html_lib
import logging
from datetime import datetime, timezone

import httpx

from app.core.config import Settings, get_settings
from app.core.errors import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    return f"{email[:3]}***"


class ResendMailer:
    """Transactional mail over the Resend HTTP API."""

    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.RESEND_API_KEY.strip()
        self.api_url = settings.RESEND_API_URL
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.timeout = settings.MAIL_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        if not self.is_configured:
            logger.error("RESEND_API_KEY not configured")
            raise ConfigurationError("Email service not configured")

    async def send(self, to_email: str, subject: str, html: str, from_name: str | None = None) -> dict:
        self.ensure_configured()

        payload = {
            "from": f"{from_name or self.from_name} <{self.from_email}>",
            "to": [to_email],
            "subject": subject,
            "html": html,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.error("Resend request failed for %s: %r", mask_email(to_email), exc)
            raise DeliveryError("Failed to send email") from exc

        if r.status_code >= 400:
            logger.error("Resend error %s for %s: %s", r.status_code, mask_email(to_email), r.text)
            raise DeliveryError("Failed to send email")

        logger.info("Email sent to %s: %s", mask_email(to_email), subject)
        return r.json() if r.content else {}


def get_mailer() -> ResendMailer:
    return ResendMailer(get_settings())


# ── Templates ─────────────────────────────────────────────────────────

OTP_SUBJECTS = {
    "login": "Your COHSSA Election Login Code",
    "verification": "Your COHSSA Voter Verification Code",
}

OTP_INTROS = {
    "login": "Use this code to login to your voter account:",
    "verification": "Use this code to verify your voter registration:",
}


def render_otp_email(code: str, purpose: str, ttl_minutes: int) -> tuple[str, str]:
    subject = OTP_SUBJECTS[purpose]
    year = datetime.now(timezone.utc).year
    html = f"""
    <div style="font-family:Arial,sans-serif;max-width:480px;margin:auto;background:#fff;border-radius:12px;overflow:hidden">
      <div style="background:#059669;padding:32px 24px;text-align:center">
        <h1 style="color:#fff;margin:0;font-size:24px;">COHSSA Elections</h1>
        <p style="color:#d1fae5;margin:8px 0 0 0;font-size:14px;">College of Health Sciences Students Association</p>
      </div>
      <div style="padding:32px 24px">
        <h2 style="color:#18181b;margin:0 0 16px 0;font-size:20px;">Your Verification Code</h2>
        <p style="color:#71717a;margin:0 0 24px 0;font-size:14px;line-height:1.5;">{OTP_INTROS[purpose]}</p>
        <div style="background:#f4f4f5;border-radius:8px;padding:20px;text-align:center;margin-bottom:24px;">
          <span style="font-size:36px;font-weight:bold;letter-spacing:8px;color:#059669;">{code}</span>
        </div>
        <p style="color:#a1a1aa;margin:0;font-size:12px;text-align:center;">
          This code expires in <strong>{ttl_minutes} minutes</strong>.<br>
          If you didn't request this code, please ignore this email.
        </p>
      </div>
      <div style="background:#f4f4f5;padding:16px 24px;text-align:center">
        <p style="color:#71717a;margin:0;font-size:12px;">&copy; {year} ISECO - Al-Hikmah University Chapter</p>
      </div>
    </div>
    """
    return subject, html


def render_editorial_email(
    author_name: str | None,
    content_title: str,
    content_type: str,
    published: bool,
    site_url: str,
) -> tuple[str, str]:
    author_name = html_lib.escape(author_name) if author_name else None
    content_title = html_lib.escape(content_title)
    content_type = html_lib.escape(content_type)

    if published:
        subject = f"🎉 Your {content_type} has been published!"
        color, status_text = "#10B981", "Published"
        message = (
            "Congratulations! Your content has been reviewed and approved by our editorial team. "
            "It is now live and visible to all COHSSA members."
        )
        button = (
            f'<a href="{site_url.rstrip("/")}/editorial" '
            'style="display:inline-block;background:#1a472a;color:#fff;text-decoration:none;'
            'padding:14px 28px;border-radius:8px;font-weight:600;margin:16px 0;">View Published Content</a>'
        )
    else:
        subject = f"Update on your {content_type} submission"
        color, status_text = "#EF4444", "Rejected"
        message = (
            "Unfortunately, your content submission did not meet our editorial guidelines. "
            "Please review the requirements and feel free to submit again."
        )
        button = ""

    html = f"""
    <div style="font-family:Arial,sans-serif;max-width:600px;margin:auto;padding:40px 20px">
      <div style="background:#1a472a;border-radius:16px 16px 0 0;padding:32px;text-align:center">
        <h1 style="color:#fff;margin:0;font-size:24px;">COHSSA Editorial</h1>
        <p style="color:rgba(255,255,255,0.8);margin:8px 0 0 0;">Content Review Notification</p>
      </div>
      <div style="background:#fff;padding:32px;border-radius:0 0 16px 16px">
        <p style="color:#374151;font-size:16px;margin:0 0 16px 0;">Dear {author_name or 'Author'},</p>
        <div style="border-left:4px solid {color};padding:16px;margin:24px 0;">
          <p style="margin:0;color:{color};font-weight:600;font-size:18px;">Status: {status_text}</p>
        </div>
        <div style="background:#f9fafb;padding:20px;border-radius:12px;margin:24px 0;">
          <p style="color:#6b7280;font-size:14px;margin:0 0 8px 0;">Content Details:</p>
          <p style="color:#111827;font-size:16px;font-weight:600;margin:0 0 4px 0;">{content_title}</p>
          <p style="color:#6b7280;font-size:14px;margin:0;">Type: {content_type}</p>
        </div>
        <p style="color:#374151;font-size:15px;line-height:1.6;margin:24px 0;">{message}</p>
        {button}
        <p style="color:#9ca3af;font-size:13px;margin:32px 0 0 0;text-align:center;">
          College of Health Sciences Students Association
        </p>
      </div>
    </div>
    """
    return subject, html
