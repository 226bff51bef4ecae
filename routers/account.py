from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from schemas.auth import AccountRead, LoginRequest, RegisterRequest
from services import account_service

router = APIRouter(prefix="/account", tags=["account"])


@router.post(
    "/register",
    response_model=AccountRead,
    status_code=status.HTTP_201_CREATED,
    summary="Создать аккаунт и получить JWT",
)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AccountRead:
    return await account_service.register(db, payload)


@router.post(
    "/login",
    response_model=AccountRead,
    summary="Войти и получить JWT",
)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> AccountRead:
    return await account_service.login(db, payload)
