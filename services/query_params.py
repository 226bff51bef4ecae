"""
Нормализация пользовательских параметров в спецификации запросов.

Обе реализации выборки участников (ORM-проекция и сырой SQL) получают
один и тот же MemberQuery и не интерпретируют сырой ввод сами.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from models.user import User
from schemas.params import LikesParams, MessageParams, UserParams
from utils.user_helpers import years_ago


class MemberOrder(str, Enum):
    CREATED = "Created"
    LAST_ACTIVE = "LastActive"


# Единственные имена колонок, которые могут попасть в текст SQL
ORDER_COLUMNS = {
    MemberOrder.CREATED: "created_at",
    MemberOrder.LAST_ACTIVE: "last_active",
}


class LikesPredicate(str, Enum):
    LIKED = "liked"
    LIKED_BY = "likedBy"


class MessageContainer(str, Enum):
    INBOX = "Inbox"
    OUTBOX = "Outbox"
    UNREAD = "Unread"


@dataclass(frozen=True)
class Window:
    page_number: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


@dataclass(frozen=True)
class MemberQuery:
    current_username: str
    gender: str
    min_dob: date
    max_dob: date
    order: MemberOrder
    window: Window

    @property
    def order_column(self) -> str:
        return ORDER_COLUMNS[self.order]


@dataclass(frozen=True)
class LikesQuery:
    user_id: int
    predicate: LikesPredicate
    window: Window


@dataclass(frozen=True)
class MessageQuery:
    username: str
    container: MessageContainer
    window: Window


def resolve_order(order_by: Optional[str]) -> MemberOrder:
    """
    "created" -> Created, всё остальное -> LastActive.
    Ключ сортировки приводится к виду колонки (первая буква заглавная)
    и сверяется со списком; неизвестное значение молча даёт сортировку по умолчанию.
    """
    if not order_by:
        return MemberOrder.LAST_ACTIVE
    key = order_by[0].upper() + order_by[1:]
    if key == MemberOrder.CREATED.value:
        return MemberOrder.CREATED
    return MemberOrder.LAST_ACTIVE


def dob_range(min_age: int, max_age: int, today: Optional[date] = None) -> tuple[date, date]:
    """
    Возрастные границы -> диапазон дат рождения: min_dob < dob <= max_dob.
    +1 на стороне max_age оставляет в выборке тех, у кого день рождения
    в этом году ещё впереди; родившиеся ровно в min_dob сегодня
    стали на год старше max_age и в выборку не входят.
    """
    today = today or date.today()
    return years_ago(today, max_age + 1), years_ago(today, min_age)


def opposite_gender(gender: Optional[str]) -> str:
    return "female" if gender == "male" else "male"


def build_member_query(params: UserParams, current_user: User, today: Optional[date] = None) -> MemberQuery:
    min_dob, max_dob = dob_range(params.min_age, params.max_age, today)
    return MemberQuery(
        current_username=current_user.username,
        gender=params.gender or opposite_gender(current_user.gender),
        min_dob=min_dob,
        max_dob=max_dob,
        order=resolve_order(params.order_by),
        window=Window(params.page_number, params.page_size),
    )


def build_likes_query(params: LikesParams, user_id: int) -> LikesQuery:
    # Неизвестный predicate - ошибка, а не пустой результат
    try:
        predicate = LikesPredicate(params.predicate)
    except ValueError as exc:
        raise ValueError(f"Unknown likes predicate: {params.predicate!r}") from exc
    return LikesQuery(
        user_id=user_id,
        predicate=predicate,
        window=Window(params.page_number, params.page_size),
    )


def resolve_container(container: Optional[str]) -> MessageContainer:
    if container == MessageContainer.INBOX.value:
        return MessageContainer.INBOX
    if container == MessageContainer.OUTBOX.value:
        return MessageContainer.OUTBOX
    return MessageContainer.UNREAD


def build_message_query(params: MessageParams, username: str) -> MessageQuery:
    return MessageQuery(
        username=username,
        container=resolve_container(params.container),
        window=Window(params.page_number, params.page_size),
    )
