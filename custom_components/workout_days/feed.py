"""Activity feed: recorded activities, likes, comments and comment likes.

Activities are written by ActivityRecorder when a day or weight row changes
(a workout completed, missed or planned, a rest day planned, a weight
logged). Likes and comments add notification activities to the owner's own
feed. Friends' feeds leave those notifications out.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from .const import (
    COMMENT_MAX_LENGTH,
    COMMENT_PREVIEW_LENGTH,
    FEED_PAGE_SIZE,
    TABLE_ACTIVITIES,
    TABLE_ACTIVITY_COMMENTS,
    TABLE_ACTIVITY_LIKES,
    TABLE_COMMENT_LIKES,
    TABLE_DAYS,
    TABLE_FRIENDS,
    TABLE_PROFILES,
    TABLE_TRAINERS,
    TABLE_WEIGHT,
)
from .errors import ConflictError, InvalidInputError, NotFoundError
from .models import DayKind
from .row_store import EVENT_DELETE, RowChange, RowStore

_LOGGER = logging.getLogger(__name__)


class ActivityType(StrEnum):
    WORKOUT_COMPLETED = "workout_completed"
    WORKOUT_MISSED = "workout_missed"
    WORKOUT_PLANNED = "workout_planned"
    REST_DAY_PLANNED = "rest_day_planned"
    WEIGHT_LOGGED = "weight_logged"
    ACTIVITY_LIKED = "activity_liked"
    ACTIVITY_COMMENTED = "activity_commented"
    COMMENT_LIKED = "comment_liked"


NOTIFICATION_TYPES = frozenset(
    {ActivityType.ACTIVITY_LIKED, ActivityType.ACTIVITY_COMMENTED, ActivityType.COMMENT_LIKED}
)


def validate_comment(value: Any) -> str:
    text = str(value or "").strip()
    if not text:
        raise InvalidInputError("Comment cannot be empty")
    if len(text) > COMMENT_MAX_LENGTH:
        raise InvalidInputError(f"Comment must be at most {COMMENT_MAX_LENGTH} characters")
    return text


async def _async_profiles(rows: RowStore, user_ids: set[str]) -> dict[str, dict[str, Any]]:
    if not user_ids:
        return {}
    found = await rows.async_select(TABLE_PROFILES, in_={"id": list(user_ids)})
    return {str(p["id"]): p for p in found}


async def _async_insert_activity(
    rows: RowStore,
    user_id: str,
    activity_type: ActivityType,
    *,
    reference_id: str | None = None,
    reference_date: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    inserted = await rows.async_insert(
        TABLE_ACTIVITIES,
        [
            {
                "user_id": user_id,
                "activity_type": str(activity_type),
                "reference_id": reference_id,
                "reference_date": reference_date,
                "metadata": metadata or {},
            }
        ],
    )
    _LOGGER.debug("Recorded %s activity %s for user_id=%s", activity_type, inserted[0]["id"], user_id)
    return inserted[0]


class ActivityRecorder:
    """Turns day and weight row changes into activities for their owner."""

    def __init__(self, rows: RowStore) -> None:
        self._rows = rows

    async def _async_is_trainer(self, owner_id: str) -> bool:
        return bool(await self._rows.async_select(TABLE_TRAINERS, eq={"id": owner_id}, limit=1))

    async def async_handle_change(self, change: RowChange) -> dict[str, Any] | None:
        """Record the activity a change implies; None when it implies none."""
        if change.event == EVENT_DELETE or change.new is None:
            return None
        owner_id = str(change.new.get("owner_id") or "")
        if not owner_id or await self._async_is_trainer(owner_id):
            return None
        if change.table == TABLE_DAYS:
            return await self._async_day_activity(owner_id, change.new, change.old or {})
        if change.table == TABLE_WEIGHT:
            return await self._async_weight_activity(owner_id, change.new, change.old or {})
        return None

    async def _async_day_activity(
        self, owner_id: str, new: dict[str, Any], old: dict[str, Any]
    ) -> dict[str, Any] | None:
        kind = str(new.get("type") or DayKind.EMPTY)
        activity_type: ActivityType | None = None
        if kind == DayKind.WORKOUT and new.get("completed") and not old.get("completed"):
            activity_type = ActivityType.WORKOUT_COMPLETED
        elif kind == DayKind.WORKOUT and new.get("missed") and not old.get("missed"):
            activity_type = ActivityType.WORKOUT_MISSED
        elif kind != old.get("type"):
            if kind == DayKind.WORKOUT:
                activity_type = ActivityType.WORKOUT_PLANNED
            elif kind == DayKind.REST:
                activity_type = ActivityType.REST_DAY_PLANNED
        if activity_type is None:
            return None
        metadata: dict[str, Any] = {}
        if kind == DayKind.WORKOUT:
            metadata = {"exercises": list(new.get("exercises") or []), "duration": new.get("duration")}
        if new.get("notes"):
            metadata["notes"] = new["notes"]
        return await _async_insert_activity(
            self._rows,
            owner_id,
            activity_type,
            reference_id=str(new.get("id") or "") or None,
            reference_date=new.get("date"),
            metadata=metadata,
        )

    async def _async_weight_activity(
        self, owner_id: str, new: dict[str, Any], old: dict[str, Any]
    ) -> dict[str, Any] | None:
        if old and old.get("weight") == new.get("weight"):
            return None
        earlier = await self._rows.async_select(
            TABLE_WEIGHT,
            eq={"owner_id": owner_id},
            lte={"date": new["date"]},
            order_by="date",
            descending=True,
        )
        previous = next((r for r in earlier if r.get("date") != new["date"]), None)
        weight = float(new["weight"])
        metadata: dict[str, Any] = {"weight": weight}
        if previous is not None:
            metadata["previous_weight"] = float(previous["weight"])
            metadata["previous_date"] = previous["date"]
            metadata["weight_change"] = round(weight - float(previous["weight"]), 2)
        return await _async_insert_activity(
            self._rows,
            owner_id,
            ActivityType.WEIGHT_LOGGED,
            reference_id=str(new.get("id") or "") or None,
            reference_date=new.get("date"),
            metadata=metadata,
        )


class ActivityFeed:
    """Feeds and engagement on behalf of one user."""

    def __init__(self, rows: RowStore, user_id: str, *, page_size: int = FEED_PAGE_SIZE) -> None:
        self._rows = rows
        self.user_id = user_id
        self.page_size = page_size

    async def _async_username(self) -> str | None:
        found = await self._rows.async_select(TABLE_PROFILES, eq={"id": self.user_id}, limit=1)
        return found[0].get("username") if found else None

    async def _async_page(self, activities: list[dict[str, Any]], page: int) -> dict[str, Any]:
        offset = max(0, int(page)) * self.page_size
        chunk = activities[offset : offset + self.page_size]
        return {
            "activities": await self._async_decorate(chunk),
            "page": max(0, int(page)),
            "has_more": offset + self.page_size < len(activities),
        }

    async def async_friends_feed(self, page: int = 0) -> dict[str, Any]:
        """Friends' activities, newest first, without notifications."""
        friends = await self._rows.async_select(TABLE_FRIENDS, eq={"user_id": self.user_id})
        friend_ids = [str(f["friend_id"]) for f in friends]
        if not friend_ids:
            return {"activities": [], "page": 0, "has_more": False}
        activities = await self._rows.async_select(
            TABLE_ACTIVITIES,
            in_={"user_id": friend_ids},
            order_by="created_at",
            descending=True,
        )
        activities = [a for a in activities if a.get("activity_type") not in NOTIFICATION_TYPES]
        return await self._async_page(activities, page)

    async def async_my_feed(self, page: int = 0) -> dict[str, Any]:
        """The user's own activities and the notifications addressed to them."""
        activities = await self._rows.async_select(
            TABLE_ACTIVITIES,
            eq={"user_id": self.user_id},
            order_by="created_at",
            descending=True,
        )
        return await self._async_page(activities, page)

    async def _async_decorate(self, activities: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not activities:
            return []
        activity_ids = [a["id"] for a in activities]
        likes = await self._rows.async_select(
            TABLE_ACTIVITY_LIKES, in_={"activity_id": activity_ids}, order_by="created_at"
        )
        comments = await self._rows.async_select(
            TABLE_ACTIVITY_COMMENTS, in_={"activity_id": activity_ids}, order_by="created_at"
        )
        comment_likes = []
        if comments:
            comment_likes = await self._rows.async_select(
                TABLE_COMMENT_LIKES, in_={"comment_id": [c["id"] for c in comments]}, order_by="created_at"
            )
        user_ids = {str(r["user_id"]) for r in [*activities, *likes, *comments, *comment_likes]}
        profiles = await _async_profiles(self._rows, user_ids)

        def _person(row: dict[str, Any]) -> dict[str, Any]:
            profile = profiles.get(str(row["user_id"]), {})
            return {
                "user_id": row["user_id"],
                "username": profile.get("username"),
                "avatar_url": profile.get("avatar_url"),
            }

        def _like(row: dict[str, Any]) -> dict[str, Any]:
            return {"id": row["id"], **_person(row), "created_at": row.get("created_at")}

        result: list[dict[str, Any]] = []
        for activity in activities:
            activity_likes = [_like(r) for r in likes if r["activity_id"] == activity["id"]]
            activity_comments = []
            for comment in (c for c in comments if c["activity_id"] == activity["id"]):
                liked = [_like(r) for r in comment_likes if r["comment_id"] == comment["id"]]
                activity_comments.append(
                    {
                        "id": comment["id"],
                        **_person(comment),
                        "comment": comment["comment"],
                        "created_at": comment.get("created_at"),
                        "likes": liked,
                        "liked_by_me": any(like["user_id"] == self.user_id for like in liked),
                    }
                )
            result.append(
                {
                    "id": activity["id"],
                    **_person(activity),
                    "activity_type": activity["activity_type"],
                    "reference_id": activity.get("reference_id"),
                    "reference_date": activity.get("reference_date"),
                    "metadata": activity.get("metadata") or {},
                    "created_at": activity.get("created_at"),
                    "likes": activity_likes,
                    "comments": activity_comments,
                    "liked_by_me": any(like["user_id"] == self.user_id for like in activity_likes),
                    "my_comment": next((c for c in activity_comments if c["user_id"] == self.user_id), None),
                }
            )
        return result

    async def _async_engageable(self, activity_id: str) -> dict[str, Any]:
        found = await self._rows.async_select(TABLE_ACTIVITIES, eq={"id": str(activity_id)}, limit=1)
        if not found:
            raise NotFoundError(f"Activity {activity_id} does not exist")
        if found[0].get("activity_type") in NOTIFICATION_TYPES:
            raise InvalidInputError("Notifications cannot be liked or commented on")
        return found[0]

    async def async_toggle_like(self, activity_id: str) -> bool:
        """Like or unlike an activity; return whether it is liked afterwards."""
        activity = await self._async_engageable(activity_id)
        removed = await self._rows.async_delete(
            TABLE_ACTIVITY_LIKES, eq={"activity_id": activity["id"], "user_id": self.user_id}
        )
        if removed:
            return False
        await self._rows.async_insert(TABLE_ACTIVITY_LIKES, [{"activity_id": activity["id"], "user_id": self.user_id}])
        if activity["user_id"] != self.user_id:
            await _async_insert_activity(
                self._rows,
                str(activity["user_id"]),
                ActivityType.ACTIVITY_LIKED,
                reference_id=activity["id"],
                metadata={"liker_id": self.user_id, "liker_username": await self._async_username()},
            )
        return True

    async def async_add_comment(self, activity_id: str, text: str) -> dict[str, Any]:
        comment = validate_comment(text)
        activity = await self._async_engageable(activity_id)
        try:
            inserted = await self._rows.async_insert(
                TABLE_ACTIVITY_COMMENTS,
                [{"activity_id": activity["id"], "user_id": self.user_id, "comment": comment}],
            )
        except ConflictError as err:
            raise ConflictError("You already commented on this activity; edit that comment instead") from err
        if activity["user_id"] != self.user_id:
            await _async_insert_activity(
                self._rows,
                str(activity["user_id"]),
                ActivityType.ACTIVITY_COMMENTED,
                reference_id=activity["id"],
                metadata={
                    "commenter_id": self.user_id,
                    "commenter_username": await self._async_username(),
                    "comment": comment,
                    "comment_preview": comment[:COMMENT_PREVIEW_LENGTH],
                },
            )
        return inserted[0]

    async def async_update_comment(self, comment_id: str, text: str) -> dict[str, Any]:
        comment = validate_comment(text)
        updated = await self._rows.async_update(
            TABLE_ACTIVITY_COMMENTS,
            {"comment": comment},
            eq={"id": str(comment_id), "user_id": self.user_id},
        )
        if not updated:
            raise NotFoundError(f"You have no comment {comment_id}")
        return updated[0]

    async def async_delete_comment(self, comment_id: str) -> dict[str, Any]:
        removed = await self._rows.async_delete(
            TABLE_ACTIVITY_COMMENTS, eq={"id": str(comment_id), "user_id": self.user_id}
        )
        if not removed:
            raise NotFoundError(f"You have no comment {comment_id}")
        await self._rows.async_delete(TABLE_COMMENT_LIKES, eq={"comment_id": str(comment_id)})
        return removed[0]

    async def async_toggle_comment_like(self, comment_id: str) -> bool:
        """Like or unlike someone else's comment; return whether it is liked afterwards."""
        found = await self._rows.async_select(TABLE_ACTIVITY_COMMENTS, eq={"id": str(comment_id)}, limit=1)
        if not found:
            raise NotFoundError(f"Comment {comment_id} does not exist")
        comment = found[0]
        if comment["user_id"] == self.user_id:
            raise InvalidInputError("You cannot like your own comment")
        removed = await self._rows.async_delete(
            TABLE_COMMENT_LIKES, eq={"comment_id": comment["id"], "user_id": self.user_id}
        )
        if removed:
            return False
        await self._rows.async_insert(TABLE_COMMENT_LIKES, [{"comment_id": comment["id"], "user_id": self.user_id}])
        await _async_insert_activity(
            self._rows,
            str(comment["user_id"]),
            ActivityType.COMMENT_LIKED,
            reference_id=comment["activity_id"],
            metadata={
                "liker_id": self.user_id,
                "liker_username": await self._async_username(),
                "comment_preview": str(comment["comment"])[:COMMENT_PREVIEW_LENGTH],
            },
        )
        return True
