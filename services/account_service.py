import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.security import create_access_token, hash_password, verify_password
from models.user import User
from schemas.auth import AccountRead, LoginRequest, RegisterRequest
from schemas.member import MemberUpdate
from services.errors import BadRequestError, PersistenceError, UnauthorizedError

logger = logging.getLogger(__name__)

# Одинаковый ответ и для неизвестного логина, и для неверного пароля
INVALID_CREDENTIALS = "Invalid username or password"


def to_account_read(user: User) -> AccountRead:
    main = user.main_photo
    return AccountRead(
        username=user.username,
        token=create_access_token(user),
        known_as=user.known_as,
        gender=user.gender,
        photo_url=main.url if main else None,
    )


async def user_exists(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(User.id).where(func.lower(User.username) == username.lower()))
    return result.scalar_one_or_none() is not None


async def register(db: AsyncSession, payload: RegisterRequest) -> AccountRead:
    if await user_exists(db, payload.username):
        raise BadRequestError("Username is taken")

    password_hash, salt = hash_password(payload.password)
    user = User(
        username=payload.username.lower(),
        password_hash=password_hash,
        password_salt=salt,
        known_as=payload.known_as,
        gender=payload.gender,
        date_of_birth=payload.date_of_birth,
        city=payload.city,
        country=payload.country,
        photos=[],
    )
    db.add(user)
    await db.commit()
    logger.info("Registered user %s", user.username)
    return to_account_read(user)


async def login(db: AsyncSession, payload: LoginRequest) -> AccountRead:
    result = await db.execute(
        select(User)
        .where(func.lower(User.username) == payload.username.lower())
        .options(selectinload(User.photos))
    )
    user = result.scalar_one_or_none()
    if not user or not user.password_hash:
        raise UnauthorizedError(INVALID_CREDENTIALS)
    if not verify_password(payload.password, user.password_hash, user.password_salt):
        raise UnauthorizedError(INVALID_CREDENTIALS)
    return to_account_read(user)


async def update_profile(db: AsyncSession, user: User, payload: MemberUpdate) -> None:
    for field, value in payload.model_dump().items():
        setattr(user, field, value)

    # Как и в raw-варианте: ничего не изменилось - сохранение не удалось
    if not db.is_modified(user):
        raise PersistenceError("Failed to update user")
    await db.commit()
    logger.info("Profile of %s updated", user.username)
