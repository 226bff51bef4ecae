"""Утилиты для вычисления возраста и преобразования строк БД в схемы Pydantic."""
from collections.abc import Iterable, Mapping
from datetime import date
from typing import List, Optional

from schemas.like import LikeRead
from schemas.member import MemberRead
from schemas.photo import PhotoRead

MEMBER_FIELDS = (
    "id",
    "username",
    "known_as",
    "gender",
    "introduction",
    "looking_for",
    "interests",
    "city",
    "country",
    "created_at",
    "last_active",
)


def years_ago(day: date, years: int) -> date:
    """Та же дата `years` лет назад; 29 февраля в невисокосный год становится 28-м."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    today = today or date.today()
    age = today.year - date_of_birth.year
    # День рождения в этом году ещё не наступил
    if date_of_birth > years_ago(today, age):
        age -= 1
    return age


def to_member_read(
    fields: Mapping,
    photo_url: Optional[str],
    photos: Iterable[PhotoRead] = (),
) -> MemberRead:
    """Сконвертировать строку с колонками пользователя в MemberRead."""
    data = {name: fields[name] for name in MEMBER_FIELDS}
    return MemberRead(
        **data,
        age=calculate_age(fields["date_of_birth"]),
        photo_url=photo_url,
        photos=list(photos),
    )


def to_like_read(fields: Mapping) -> LikeRead:
    return LikeRead(
        id=fields["id"],
        username=fields["username"],
        known_as=fields["known_as"],
        age=calculate_age(fields["date_of_birth"]),
        photo_url=fields["photo_url"],
        city=fields["city"],
    )


def to_photo_reads(rows: Iterable[Mapping]) -> List[PhotoRead]:
    return [
        PhotoRead(
            id=row["id"],
            url=row["url"],
            is_main=bool(row["is_main"]),
            public_id=row["public_id"],
        )
        for row in rows
    ]
