import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from core.config import settings
from models.photo import Photo
from models.user import User
from schemas.photo import PhotoRead
from services.errors import BadRequestError, NotFoundError, PersistenceError
from utils.s3 import StorageError, delete_file_from_s3, upload_file_to_s3

logger = logging.getLogger(__name__)


async def load_user_with_photos(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.photos))
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")
    return user


async def _commit(db: AsyncSession, failure: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception(failure)
        raise PersistenceError(failure) from exc


async def add_photo(db: AsyncSession, user: User, file_like) -> PhotoRead:
    user = await load_user_with_photos(db, user.id)

    if len(user.photos) >= settings.MAX_PHOTOS:
        raise BadRequestError(f"You cannot have more than {settings.MAX_PHOTOS} photos")

    try:
        url, s3_key = await run_in_threadpool(
            upload_file_to_s3,
            file_like,
            user.id,
            settings.AWS_S3_BUCKET_NAME,
        )
    except (ValueError, StorageError) as e:
        raise BadRequestError(str(e))

    # Первое фото пользователя сразу становится главным
    photo = Photo(url=url, public_id=s3_key, is_main=not user.photos)
    user.photos.append(photo)
    await _commit(db, "Error adding photo")
    return PhotoRead.model_validate(photo)


async def set_main_photo(db: AsyncSession, user: User, photo_id: int) -> None:
    user = await load_user_with_photos(db, user.id)

    photo = next((p for p in user.photos if p.id == photo_id), None)
    if not photo:
        raise NotFoundError("Photo not found")
    if photo.is_main:
        raise BadRequestError("This is already your main photo")

    current_main = user.main_photo
    if current_main:
        current_main.is_main = False
    photo.is_main = True

    # Оба флага меняются в одной транзакции
    await _commit(db, "Failed to set main photo")
    logger.info(
        "Main photo of %s switched %s -> %s",
        user.username,
        current_main.id if current_main else None,
        photo.id,
    )


async def delete_photo(db: AsyncSession, user: User, photo_id: int) -> None:
    user = await load_user_with_photos(db, user.id)

    photo = next((p for p in user.photos if p.id == photo_id), None)
    if not photo:
        raise NotFoundError("Photo not found")
    if photo.is_main:
        raise BadRequestError("You cannot delete your main photo")

    if photo.public_id:
        try:
            await run_in_threadpool(
                delete_file_from_s3,
                photo.public_id,
                settings.AWS_S3_BUCKET_NAME,
            )
        except StorageError as e:
            raise BadRequestError(str(e))

    user.photos.remove(photo)
    await _commit(db, "Failed to delete the photo")
