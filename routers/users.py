from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Path, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from routers.params import user_params
from schemas.member import MemberRead, MemberUpdate
from schemas.params import UserParams
from schemas.photo import PhotoRead
from services import account_service, photo_service
from services.member_projection import ProjectionMemberQuery
from services.member_query import MemberQueryExecutor
from services.member_sql import RawSqlMemberQuery, update_member_raw
from services.query_params import build_member_query
from utils.pagination import add_pagination_header

router = APIRouter(prefix="/users", tags=["users"])


def projection_query(db: AsyncSession = Depends(get_db)) -> MemberQueryExecutor:
    return ProjectionMemberQuery(db)


def raw_sql_query(db: AsyncSession = Depends(get_db)) -> MemberQueryExecutor:
    return RawSqlMemberQuery(db)


async def _list_members(
    executor: MemberQueryExecutor,
    params: UserParams,
    current_user: User,
    response: Response,
) -> List[MemberRead]:
    query = build_member_query(params, current_user)
    members = await executor.get_members(query)
    add_pagination_header(response, members)
    return members.items


async def _get_member(executor: MemberQueryExecutor, username: str) -> MemberRead:
    member = await executor.get_member(username)
    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return member


@router.get(
    "/",
    response_model=List[MemberRead],
    summary="Список участников (ORM-проекция)",
)
async def get_users(
    response: Response,
    params: UserParams = Depends(user_params),
    executor: MemberQueryExecutor = Depends(projection_query),
    current_user: User = Depends(get_current_user),
) -> List[MemberRead]:
    return await _list_members(executor, params, current_user, response)


@router.get(
    "/raw",
    response_model=List[MemberRead],
    summary="Список участников (сырой SQL)",
)
async def get_users_raw(
    response: Response,
    params: UserParams = Depends(user_params),
    executor: MemberQueryExecutor = Depends(raw_sql_query),
    current_user: User = Depends(get_current_user),
) -> List[MemberRead]:
    return await _list_members(executor, params, current_user, response)


@router.put(
    "/",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Обновить свой профиль",
)
async def update_user(
    payload: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await account_service.update_profile(db, current_user, payload)


@router.put(
    "/raw",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Обновить свой профиль (сырой SQL)",
)
async def update_user_raw(
    payload: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await update_member_raw(db, current_user.username, payload)


@router.post(
    "/add-photo",
    response_model=PhotoRead,
    status_code=status.HTTP_201_CREATED,
    summary="Загрузить фото",
)
async def add_photo(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PhotoRead:
    return await photo_service.add_photo(db, current_user, file.file)


@router.put(
    "/set-main-photo/{photo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Сделать фото главным",
)
async def set_main_photo(
    photo_id: int = Path(..., description="ID фотографии"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await photo_service.set_main_photo(db, current_user, photo_id)


@router.delete(
    "/delete-photo/{photo_id}",
    status_code=status.HTTP_200_OK,
    summary="Удалить фото по ID и убрать файл из хранилища",
)
async def delete_photo(
    photo_id: int = Path(..., description="ID фотографии"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await photo_service.delete_photo(db, current_user, photo_id)


@router.get(
    "/raw/{username}",
    response_model=MemberRead,
    summary="Профиль участника (сырой SQL)",
)
async def get_user_raw(
    username: str = Path(..., description="Имя пользователя"),
    executor: MemberQueryExecutor = Depends(raw_sql_query),
    current_user: User = Depends(get_current_user),
) -> MemberRead:
    return await _get_member(executor, username)


@router.get(
    "/{username}",
    response_model=MemberRead,
    summary="Профиль участника",
)
async def get_user(
    username: str = Path(..., description="Имя пользователя"),
    executor: MemberQueryExecutor = Depends(projection_query),
    current_user: User = Depends(get_current_user),
) -> MemberRead:
    return await _get_member(executor, username)
