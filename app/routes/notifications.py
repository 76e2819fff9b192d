from fastapi import APIRouter, Depends

from app.controllers.notification_controller import send_editorial_notification
from app.core.dependencies import get_current_admin
from app.core.email_service import ResendMailer, get_mailer
from app.models.admin import Admin
from app.schemas.notification import EditorialNotificationIn, NotificationOut

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.post("/editorial", response_model=NotificationOut, summary="Editorial review result email")
async def editorial(
    payload: EditorialNotificationIn,
    mailer: ResendMailer = Depends(get_mailer),
    admin: Admin = Depends(get_current_admin),
) -> NotificationOut:
    return await send_editorial_notification(mailer, payload)
