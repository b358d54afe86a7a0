from __future__ import annotations

import pytest

from custom_components.workout_days.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from custom_components.workout_days.row_store import RowStore
from custom_components.workout_days.social import SocialService, validate_username


@pytest.mark.parametrize("value", ["ab", "x" * 21, "bad name", "semi;colon"])
def test_validate_username_rejects(value: str) -> None:
    with pytest.raises(InvalidInputError):
        validate_username(value)


def test_validate_username_normalizes() -> None:
    assert validate_username(" Alice_1 ") == "alice_1"


async def _pair() -> tuple[RowStore, SocialService, SocialService]:
    rows = RowStore()
    alice = SocialService(rows, "u1")
    bob = SocialService(rows, "u2")
    await alice.async_set_username("Alice")
    await bob.async_set_username("bob-2")
    return rows, alice, bob


async def test_username_must_be_unique() -> None:
    _rows, alice, bob = await _pair()
    with pytest.raises(ConflictError):
        await bob.async_set_username("alice")
    await alice.async_set_username("alice")


async def test_friend_request_flow() -> None:
    rows, alice, bob = await _pair()

    with pytest.raises(NotFoundError):
        await alice.async_send_request("nobody")
    with pytest.raises(InvalidInputError):
        await alice.async_send_request("alice")

    request = await alice.async_send_request("bob-2")
    with pytest.raises(ConflictError):
        await alice.async_send_request("bob-2")
    with pytest.raises(ConflictError):
        await bob.async_send_request("alice")

    pending = await bob.async_pending_requests()
    assert [p["sender_username"] for p in pending] == ["alice"]

    with pytest.raises(PermissionDeniedError):
        await alice.async_accept(request["id"])

    await bob.async_accept(request["id"])

    assert [f["username"] for f in await alice.async_list_friends()] == ["bob-2"]
    assert [f["username"] for f in await bob.async_list_friends()] == ["alice"]
    assert await rows.async_count("friend_requests") == 0
    with pytest.raises(ConflictError):
        await alice.async_send_request("bob-2")


async def test_decline_and_remove() -> None:
    rows, alice, bob = await _pair()
    request = await alice.async_send_request("bob-2")
    await bob.async_decline(request["id"])
    assert await bob.async_pending_requests() == []

    await rows.async_insert(
        "friends",
        [{"user_id": "u1", "friend_id": "u2"}, {"user_id": "u2", "friend_id": "u1"}],
    )
    await alice.async_remove_friend("u2")
    assert await rows.async_count("friends") == 0


async def test_friends_workouts_for_a_date() -> None:
    rows, alice, bob = await _pair()
    request = await alice.async_send_request("bob-2")
    await bob.async_accept(request["id"])
    await rows.async_insert(
        "days",
        [
            {"owner_id": "u2", "date": "2024-01-05", "type": "workout", "exercises": ["Running"]},
            {"owner_id": "u2", "date": "2024-01-06", "type": "workout"},
            {"owner_id": "u3", "date": "2024-01-05", "type": "workout"},
        ],
    )

    workouts = await alice.async_friends_workouts("2024-01-05")

    assert len(workouts) == 1
    assert workouts[0]["username"] == "bob-2"
    assert workouts[0]["exercises"] == ["Running"]
