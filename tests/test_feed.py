from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from custom_components.workout_days.day_manager import UserDayManager
from custom_components.workout_days.errors import ConflictError, InvalidInputError, NotFoundError
from custom_components.workout_days.feed import ActivityFeed, ActivityRecorder, validate_comment
from custom_components.workout_days.models import DayKind
from custom_components.workout_days.row_store import RowChange, RowStore
from custom_components.workout_days.social import SocialService
from custom_components.workout_days.weight import WeightTracker


def _today(value: date):
    return lambda: value


def _capture(rows: RowStore) -> list[RowChange]:
    changes: list[RowChange] = []
    rows.async_subscribe("days", changes.append)
    rows.async_subscribe("weight_entries", changes.append)
    return changes


async def _record_all(recorder: ActivityRecorder, changes: list[RowChange]) -> None:
    while changes:
        await recorder.async_handle_change(changes.pop(0))


async def _types(rows: RowStore, user_id: str) -> list[str]:
    found = await rows.async_select("activities", eq={"user_id": user_id})
    return [a["activity_type"] for a in found]


async def _friends() -> RowStore:
    """alice (u1) and bob (u2) are friends; carol (u3) is a stranger."""
    rows = RowStore()
    for user_id, name in (("u1", "alice"), ("u2", "bob-2"), ("u3", "carol")):
        await SocialService(rows, user_id).async_set_username(name)
    await rows.async_insert(
        "friends",
        [{"user_id": "u1", "friend_id": "u2"}, {"user_id": "u2", "friend_id": "u1"}],
    )
    return rows


async def _activity(rows: RowStore, user_id: str, activity_type: str = "workout_completed") -> dict:
    inserted = await rows.async_insert(
        "activities",
        [{"user_id": user_id, "activity_type": activity_type, "metadata": {"exercises": ["Squats"]}}],
    )
    return inserted[0]


@pytest.mark.parametrize("value", ["", "   ", "x" * 501])
def test_validate_comment_rejects(value: str) -> None:
    with pytest.raises(InvalidInputError):
        validate_comment(value)


def test_validate_comment_strips() -> None:
    assert validate_comment("  Nice work ") == "Nice work"


async def test_recorder_turns_day_changes_into_activities() -> None:
    rows = RowStore()
    changes = _capture(rows)
    recorder = ActivityRecorder(rows)
    manager = UserDayManager(rows, "u1", today=_today(date(2024, 1, 1)))
    await manager.async_load_initial()
    await _record_all(recorder, changes)
    assert await _types(rows, "u1") == []

    first, second = manager.days[0], manager.days[1]
    await manager.async_save_day(replace(first, kind=DayKind.WORKOUT, exercises=("Squats",), duration=45))
    await manager.async_toggle_complete(first.id)
    await manager.async_save_day(replace(second, kind=DayKind.REST))
    await manager.async_toggle_missed(first.id)
    await _record_all(recorder, changes)

    assert await _types(rows, "u1") == [
        "workout_planned",
        "workout_completed",
        "rest_day_planned",
        "workout_missed",
    ]
    completed = (await rows.async_select("activities", eq={"activity_type": "workout_completed"}))[0]
    assert completed["reference_id"] == first.id
    assert completed["reference_date"] == "2024-01-01"
    assert completed["metadata"] == {"exercises": ["Squats"], "duration": 45}


async def test_recorder_ignores_trainer_days() -> None:
    rows = RowStore()
    trainer = (await rows.async_insert("trainers", [{"name": "anna"}]))[0]
    changes = _capture(rows)
    await rows.async_insert(
        "days",
        [{"owner_id": trainer["id"], "date": "2024-01-01", "type": "workout", "completed": True}],
    )

    assert await ActivityRecorder(rows).async_handle_change(changes[0]) is None
    assert await rows.async_count("activities") == 0


async def test_weight_activity_carries_the_change() -> None:
    rows = RowStore()
    changes = _capture(rows)
    recorder = ActivityRecorder(rows)
    tracker = WeightTracker(rows, "u1", today=_today(date(2024, 1, 10)))

    await tracker.async_log(80, "2024-01-01")
    await tracker.async_log(78.5, "2024-01-05")
    await tracker.async_log(78.5, "2024-01-05")
    await _record_all(recorder, changes)

    found = await rows.async_select("activities", eq={"user_id": "u1"})
    assert [a["activity_type"] for a in found] == ["weight_logged", "weight_logged"]
    assert found[0]["metadata"] == {"weight": 80.0}
    assert found[1]["metadata"] == {
        "weight": 78.5,
        "previous_weight": 80.0,
        "previous_date": "2024-01-01",
        "weight_change": -1.5,
    }


async def test_friends_feed_hides_notifications_and_strangers() -> None:
    rows = await _friends()
    workout = await _activity(rows, "u2")
    await _activity(rows, "u2", "activity_liked")
    await _activity(rows, "u3")

    feed = await ActivityFeed(rows, "u1").async_friends_feed()

    assert [a["id"] for a in feed["activities"]] == [workout["id"]]
    item = feed["activities"][0]
    assert item["username"] == "bob-2"
    assert item["likes"] == []
    assert item["comments"] == []
    assert not item["liked_by_me"]
    assert item["my_comment"] is None
    assert not feed["has_more"]


async def test_friends_feed_without_friends_is_empty() -> None:
    rows = await _friends()
    await _activity(rows, "u1")

    feed = await ActivityFeed(rows, "u3").async_friends_feed()

    assert feed == {"activities": [], "page": 0, "has_more": False}


async def test_feed_pages() -> None:
    rows = await _friends()
    for _ in range(5):
        await _activity(rows, "u2")
    feed = ActivityFeed(rows, "u1", page_size=2)

    first = await feed.async_friends_feed(0)
    last = await feed.async_friends_feed(2)

    assert len(first["activities"]) == 2
    assert first["has_more"]
    assert len(last["activities"]) == 1
    assert not last["has_more"]


async def test_like_toggles_and_notifies_the_owner() -> None:
    rows = await _friends()
    workout = await _activity(rows, "u2")
    alice = ActivityFeed(rows, "u1")
    bob = ActivityFeed(rows, "u2")

    assert await alice.async_toggle_like(workout["id"])

    item = (await alice.async_friends_feed())["activities"][0]
    assert item["liked_by_me"]
    assert [like["username"] for like in item["likes"]] == ["alice"]
    mine = await bob.async_my_feed()
    liked = [a for a in mine["activities"] if a["activity_type"] == "activity_liked"]
    assert liked[0]["metadata"] == {"liker_id": "u1", "liker_username": "alice"}
    assert liked[0]["reference_id"] == workout["id"]

    assert not await alice.async_toggle_like(workout["id"])
    assert await rows.async_count("activity_likes") == 0

    await bob.async_toggle_like(workout["id"])
    assert await _types(rows, "u2") == ["workout_completed", "activity_liked"]


async def test_like_rejects_unknown_and_notifications() -> None:
    rows = await _friends()
    notification = await _activity(rows, "u2", "comment_liked")
    alice = ActivityFeed(rows, "u1")

    with pytest.raises(NotFoundError):
        await alice.async_toggle_like("missing")
    with pytest.raises(InvalidInputError):
        await alice.async_toggle_like(notification["id"])


async def test_one_editable_comment_per_activity() -> None:
    rows = await _friends()
    workout = await _activity(rows, "u2")
    alice = ActivityFeed(rows, "u1")
    bob = ActivityFeed(rows, "u2")

    comment = await alice.async_add_comment(workout["id"], " Strong session! ")
    assert comment["comment"] == "Strong session!"
    with pytest.raises(ConflictError):
        await alice.async_add_comment(workout["id"], "Again")
    with pytest.raises(InvalidInputError):
        await alice.async_add_comment(workout["id"], "")

    notified = await rows.async_select("activities", eq={"activity_type": "activity_commented"})
    assert notified[0]["user_id"] == "u2"
    assert notified[0]["metadata"]["commenter_username"] == "alice"
    assert notified[0]["metadata"]["comment_preview"] == "Strong session!"

    with pytest.raises(NotFoundError):
        await bob.async_update_comment(comment["id"], "Hijacked")
    await alice.async_update_comment(comment["id"], "Strong session, well done")

    item = (await alice.async_friends_feed())["activities"][0]
    assert item["my_comment"]["comment"] == "Strong session, well done"
    assert [c["username"] for c in item["comments"]] == ["alice"]


async def test_comment_likes_and_delete() -> None:
    rows = await _friends()
    workout = await _activity(rows, "u2")
    alice = ActivityFeed(rows, "u1")
    bob = ActivityFeed(rows, "u2")
    comment = await alice.async_add_comment(workout["id"], "x" * 150)

    with pytest.raises(InvalidInputError):
        await alice.async_toggle_comment_like(comment["id"])
    assert await bob.async_toggle_comment_like(comment["id"])

    liked = await rows.async_select("activities", eq={"activity_type": "comment_liked"})
    assert liked[0]["user_id"] == "u1"
    assert liked[0]["metadata"]["comment_preview"] == "x" * 100
    item = (await bob.async_my_feed())["activities"]
    workout_item = next(a for a in item if a["id"] == workout["id"])
    assert workout_item["comments"][0]["liked_by_me"]

    with pytest.raises(NotFoundError):
        await bob.async_delete_comment(comment["id"])
    await alice.async_delete_comment(comment["id"])

    assert await rows.async_count("activity_comments") == 0
    assert await rows.async_count("comment_likes") == 0
    with pytest.raises(NotFoundError):
        await bob.async_toggle_comment_like(comment["id"])
