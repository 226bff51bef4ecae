import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from models.message import Message
from models.photo import Photo
from models.user import User
from schemas.message import MessageCreate, MessageRead
from services.errors import BadRequestError, NotFoundError, PersistenceError, UnauthorizedError
from services.query_params import MessageContainer, MessageQuery
from utils.pagination import PagedList

logger = logging.getLogger(__name__)


def _photo_url_of(user_id_column):
    return (
        select(Photo.url)
        .where(Photo.user_id == user_id_column, Photo.is_main.is_(True))
        .order_by(Photo.id)
        .limit(1)
        .scalar_subquery()
    )


def _main_photo_url(user: User):
    main = user.main_photo
    return main.url if main else None


def to_message_read(message: Message) -> MessageRead:
    """Отношения sender/recipient и их фото должны быть уже загружены."""
    return MessageRead(
        id=message.id,
        sender_id=message.sender_id,
        sender_username=message.sender_username,
        sender_photo_url=_main_photo_url(message.sender),
        recipient_id=message.recipient_id,
        recipient_username=message.recipient_username,
        recipient_photo_url=_main_photo_url(message.recipient),
        content=message.content,
        date_read=message.date_read,
        message_sent=message.message_sent,
    )


async def create_message(db: AsyncSession, sender: User, payload: MessageCreate) -> MessageRead:
    if payload.recipient_username.lower() == sender.username.lower():
        raise BadRequestError("You cannot send messages to yourself")

    result = await db.execute(
        select(User).where(func.lower(User.username) == payload.recipient_username.lower())
    )
    recipient = result.scalar_one_or_none()
    if not recipient:
        raise NotFoundError("User not found")

    message = Message(
        sender_id=sender.id,
        sender_username=sender.username,
        recipient_id=recipient.id,
        recipient_username=recipient.username,
        content=payload.content,
    )
    db.add(message)
    await db.commit()

    stmt = (
        select(Message)
        .where(Message.id == message.id)
        .options(
            selectinload(Message.sender).selectinload(User.photos),
            selectinload(Message.recipient).selectinload(User.photos),
        )
        .execution_options(populate_existing=True)
    )
    message = (await db.execute(stmt)).scalar_one()
    return to_message_read(message)


async def get_messages_for_user(db: AsyncSession, query: MessageQuery) -> PagedList[MessageRead]:
    username = query.username.lower()
    stmt = select(
        Message.id,
        Message.sender_id,
        Message.sender_username,
        _photo_url_of(Message.sender_id).label("sender_photo_url"),
        Message.recipient_id,
        Message.recipient_username,
        _photo_url_of(Message.recipient_id).label("recipient_photo_url"),
        Message.content,
        Message.date_read,
        Message.message_sent,
    )

    if query.container is MessageContainer.INBOX:
        stmt = stmt.where(func.lower(Message.recipient_username) == username)
    elif query.container is MessageContainer.OUTBOX:
        stmt = stmt.where(func.lower(Message.sender_username) == username)
    else:
        stmt = stmt.where(
            func.lower(Message.recipient_username) == username,
            Message.date_read.is_(None),
        )

    stmt = stmt.order_by(Message.message_sent.desc(), Message.id.desc())
    return await PagedList.create_async(
        db,
        stmt,
        query.window.page_number,
        query.window.page_size,
        row_mapper=lambda row: MessageRead.model_validate(dict(row._mapping)),
    )


async def get_message_thread(
    db: AsyncSession, current_username: str, recipient_username: str
) -> List[MessageRead]:
    """
    Переписка двух пользователей в обе стороны, от старых к новым.

    Побочный эффект: все непрочитанные сообщения, адресованные current_username,
    получают date_read и сохраняются до того, как строится ответ, поэтому
    вызывающий видит уже прочитанное состояние.
    """
    current = current_username.lower()
    other = recipient_username.lower()

    exists = await db.execute(select(User.id).where(func.lower(User.username) == other))
    if exists.scalar_one_or_none() is None:
        raise NotFoundError("User not found")

    recipient_name = func.lower(Message.recipient_username)
    sender_name = func.lower(Message.sender_username)

    stmt = (
        select(Message)
        .options(
            selectinload(Message.sender).selectinload(User.photos),
            selectinload(Message.recipient).selectinload(User.photos),
        )
        .where(
            or_(
                and_(recipient_name == current, sender_name == other),
                and_(recipient_name == other, sender_name == current),
            )
        )
        .order_by(Message.message_sent.asc(), Message.id.asc())
        .execution_options(populate_existing=True)
    )
    messages = (await db.execute(stmt)).scalars().all()

    unread = [
        m for m in messages
        if m.date_read is None and m.recipient_username.lower() == current
    ]
    if unread:
        now = datetime.now(timezone.utc)
        ids = [m.id for m in unread]
        try:
            # date_read IS NULL: уже прочитанное параллельным запросом не перезаписываем
            result = await db.execute(
                update(Message)
                .where(Message.id.in_(ids), Message.date_read.is_(None))
                .values(date_read=now)
                .returning(Message.id)
                .execution_options(synchronize_session=False)
            )
            stamped = set(result.scalars().all())
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Failed to mark thread %s<-%s as read", current, other)
            raise PersistenceError("Failed to mark messages as read") from exc

        for m in unread:
            if m.id in stamped:
                set_committed_value(m, "date_read", now)
            else:
                # Отмечено кем-то другим между выборкой и UPDATE: берём сохранённое время
                await db.refresh(m, ["date_read"])
        logger.info("Marked %d messages from %s to %s as read", len(stamped), other, current)

    return [to_message_read(m) for m in messages]


async def delete_message(db: AsyncSession, current_user: User, message_id: int) -> None:
    message = await db.get(Message, message_id)
    if not message:
        raise NotFoundError("Message not found")
    if current_user.id not in (message.sender_id, message.recipient_id):
        raise UnauthorizedError("You cannot delete this message")

    await db.delete(message)
    await db.commit()
