from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.auth_controller import get_me, login
from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.models.admin import Admin
from app.schemas.auth import LoginRequest, LoginResponse, MeResponse

router = APIRouter(prefix="/auth", tags=["Committee Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Electoral committee login",
    description="Exchanges email + password for an admin Bearer token used on every `/admin` route.",
)
async def committee_login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> LoginResponse:
    return await login(payload, db)


@router.get("/me", response_model=MeResponse, summary="Current committee member")
async def me(admin: Admin = Depends(get_current_admin)) -> MeResponse:
    return await get_me(admin)
