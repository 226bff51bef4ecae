from datetime import date, datetime, timedelta
from typing import Iterable, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from models.base import Base
from models.like import Like
from models.message import Message
from models.photo import Photo
from models.user import User
from utils.user_helpers import years_ago

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


def make_user(
    username: str,
    gender: str,
    date_of_birth: date,
    created_minutes: int = 0,
    active_minutes: int = 0,
    photos: Iterable[str] = (),
    main_index: Optional[int] = 0,
    **fields,
) -> User:
    user = User(
        username=username,
        gender=gender,
        date_of_birth=date_of_birth,
        known_as=username.title(),
        created_at=BASE_TIME + timedelta(minutes=created_minutes),
        last_active=BASE_TIME + timedelta(minutes=active_minutes),
        **fields,
    )
    user.photos = [
        Photo(url=f"https://cdn.test/{username}/{i}.jpg", is_main=(i == main_index))
        for i, _ in enumerate(photos)
    ]
    return user


def make_message(sender: User, recipient: User, content: str, minutes: int, date_read=None) -> Message:
    return Message(
        sender_id=sender.id,
        sender_username=sender.username,
        recipient_id=recipient.id,
        recipient_username=recipient.username,
        content=content,
        message_sent=BASE_TIME + timedelta(minutes=minutes),
        date_read=date_read,
    )


@pytest_asyncio.fixture
async def members(db):
    """
    Небольшая популяция для выборок: alice запрашивает, большинство
    кандидатов - мужчины. Есть совпадающие last_active, пользователи без
    фото и с несколькими фото.
    """
    today = date.today()
    users = [
        make_user("alice", "female", date(1990, 1, 1), 0, 100, photos="ab"),
        make_user("bob", "male", years_ago(today, 30), 10, 50, photos="abc", main_index=1),
        make_user("carl", "male", years_ago(today, 25), 20, 50, photos="a"),
        make_user("dave", "male", years_ago(today, 40), 30, 70, photos=""),
        make_user("eric", "male", years_ago(today, 22), 40, 10, photos="ab", main_index=None),
        make_user("finn", "male", years_ago(today, 60), 50, 90, photos="a"),
        make_user("gary", "male", years_ago(today, 19), 60, 50, photos="abcd", main_index=3),
        make_user("hank", "male", years_ago(today, 33), 70, 20, photos=""),
        make_user("ivy", "female", years_ago(today, 27), 80, 60, photos="a"),
        make_user("jane", "female", years_ago(today, 31), 90, 30, photos="ab"),
    ]
    db.add_all(users)
    await db.commit()
    return {u.username: u for u in users}


@pytest_asyncio.fixture
async def like(db, members):
    async def _like(source: str, liked: str) -> None:
        db.add(Like(source_user_id=members[source].id, liked_user_id=members[liked].id))
        await db.commit()

    return _like
