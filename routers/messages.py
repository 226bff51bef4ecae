from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from routers.params import message_params
from schemas.message import MessageCreate, MessageRead
from schemas.params import MessageParams
from services import message_service
from services.query_params import build_message_query
from utils.pagination import add_pagination_header

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post(
    "/",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Отправить сообщение",
)
async def create_message(
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageRead:
    return await message_service.create_message(db, current_user, payload)


@router.get(
    "/",
    response_model=List[MessageRead],
    summary="Входящие, исходящие или непрочитанные сообщения",
)
async def get_messages_for_user(
    response: Response,
    params: MessageParams = Depends(message_params),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[MessageRead]:
    messages = await message_service.get_messages_for_user(
        db, build_message_query(params, current_user.username)
    )
    add_pagination_header(response, messages)
    return messages.items


@router.get(
    "/thread/{username}",
    response_model=List[MessageRead],
    summary="Переписка с пользователем; входящие отмечаются прочитанными",
)
async def get_message_thread(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[MessageRead]:
    return await message_service.get_message_thread(db, current_user.username, username)


@router.delete(
    "/{message_id}",
    status_code=status.HTTP_200_OK,
    summary="Удалить сообщение",
)
async def delete_message(
    message_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await message_service.delete_message(db, current_user, message_id)
