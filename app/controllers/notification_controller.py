import logging

from app.core.config import settings
from app.core.email_service import ResendMailer, mask_email, render_editorial_email
from app.core.errors import ValidationError
from app.schemas.notification import EditorialNotificationIn, NotificationOut

logger = logging.getLogger(__name__)


async def send_editorial_notification(mailer: ResendMailer, payload: EditorialNotificationIn) -> NotificationOut:
    email = payload.email.strip()
    title = payload.content_title.strip()
    if not email or not title:
        raise ValidationError("Missing required fields: email and contentTitle")

    mailer.ensure_configured()

    logger.info("Sending editorial notification to %s for content: %s", mask_email(email), title)

    subject, html = render_editorial_email(
        author_name=payload.author_name,
        content_title=title,
        content_type=payload.content_type,
        published=payload.status == "published",
        site_url=settings.PUBLIC_SITE_URL,
    )
    await mailer.send(email, subject, html, from_name=settings.EDITORIAL_FROM_NAME)
    return NotificationOut()
