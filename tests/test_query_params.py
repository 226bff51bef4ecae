from datetime import date
from types import SimpleNamespace

import pytest

from schemas.params import LikesParams, MessageParams, UserParams
from services.query_params import (
    LikesPredicate,
    MemberOrder,
    MessageContainer,
    build_likes_query,
    build_member_query,
    build_message_query,
    dob_range,
    opposite_gender,
    resolve_container,
    resolve_order,
)
from utils.user_helpers import calculate_age, years_ago

TODAY = date(2024, 7, 15)


@pytest.mark.parametrize(
    "order_by, expected",
    [
        ("created", MemberOrder.CREATED),
        ("Created", MemberOrder.CREATED),
        ("lastActive", MemberOrder.LAST_ACTIVE),
        ("", MemberOrder.LAST_ACTIVE),
        (None, MemberOrder.LAST_ACTIVE),
        ("password_hash", MemberOrder.LAST_ACTIVE),
        ("created; DROP TABLE users", MemberOrder.LAST_ACTIVE),
    ],
)
def test_resolve_order_falls_back_silently(order_by, expected):
    assert resolve_order(order_by) is expected


def test_dob_range_adds_one_year_on_max_side():
    min_dob, max_dob = dob_range(25, 25, TODAY)
    assert min_dob == date(1998, 7, 15)
    assert max_dob == date(1999, 7, 15)


def test_dob_range_leap_day():
    min_dob, max_dob = dob_range(1, 3, date(2024, 2, 29))
    assert min_dob == date(2020, 2, 29)
    assert max_dob == date(2023, 2, 28)


@pytest.mark.parametrize(
    "dob, included",
    [
        (date(1999, 7, 15), True),   # ровно 25 сегодня
        (date(1998, 7, 16), True),   # 25, завтра исполнится 26
        (date(1998, 7, 15), False),  # сегодня исполняется 26
        (date(1998, 7, 14), False),  # уже 26
        (date(1999, 7, 16), False),  # ещё 24
    ],
)
def test_dob_range_matches_age(dob, included):
    min_dob, max_dob = dob_range(25, 25, TODAY)
    assert (min_dob < dob <= max_dob) is included


def test_calculate_age_before_and_after_birthday():
    assert calculate_age(date(1990, 1, 1), TODAY) == 34
    assert calculate_age(date(1992, 7, 16), TODAY) == 31
    assert calculate_age(date(1992, 7, 15), TODAY) == 32


def test_years_ago_clamps_feb_29():
    assert years_ago(date(2024, 2, 29), 1) == date(2023, 2, 28)


def test_opposite_gender():
    assert opposite_gender("male") == "female"
    assert opposite_gender("female") == "male"
    assert opposite_gender(None) == "male"


def test_build_member_query_defaults_gender_to_opposite():
    requester = SimpleNamespace(username="Bob", gender="male")
    query = build_member_query(UserParams(), requester, TODAY)

    assert query.gender == "female"
    assert query.current_username == "Bob"
    assert query.order is MemberOrder.LAST_ACTIVE
    assert query.order_column == "last_active"
    assert (query.min_dob, query.max_dob) == dob_range(18, 150, TODAY)
    assert query.window.offset == 0


def test_build_member_query_keeps_explicit_gender_and_window():
    requester = SimpleNamespace(username="alice", gender="female")
    params = UserParams(gender="female", order_by="created", page_number=3, page_size=7)
    query = build_member_query(params, requester, TODAY)

    assert query.gender == "female"
    assert query.order_column == "created_at"
    assert query.window.offset == 14


@pytest.mark.parametrize(
    "container, expected",
    [
        ("Inbox", MessageContainer.INBOX),
        ("Outbox", MessageContainer.OUTBOX),
        ("Unread", MessageContainer.UNREAD),
        ("inbox", MessageContainer.UNREAD),
        ("whatever", MessageContainer.UNREAD),
        (None, MessageContainer.UNREAD),
    ],
)
def test_resolve_container(container, expected):
    assert resolve_container(container) is expected


def test_build_message_query():
    query = build_message_query(MessageParams(container="Outbox", page_number=2, page_size=5), "alice")
    assert query.container is MessageContainer.OUTBOX
    assert query.window.offset == 5


def test_build_likes_query():
    query = build_likes_query(LikesParams(predicate="likedBy"), 7)
    assert query.predicate is LikesPredicate.LIKED_BY
    assert query.user_id == 7


def test_build_likes_query_rejects_unknown_predicate():
    with pytest.raises(ValueError):
        build_likes_query(LikesParams(predicate="matched"), 7)


def test_age_window_for_exact_age_this_year():
    min_dob, max_dob = dob_range(32, 32, date(2024, 3, 1))

    def qualifies(dob):
        return min_dob < dob <= max_dob

    assert not qualifies(date(1990, 1, 1))   # 34
    assert not qualifies(date(1992, 6, 1))   # 31, день рождения впереди
    assert qualifies(date(1992, 1, 15))      # 32
    assert qualifies(date(1991, 6, 1))       # 32, 33 исполнится в июне
