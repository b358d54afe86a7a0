"""Profiles, friends and friend requests."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from .const import (
    TABLE_DAYS,
    TABLE_FRIEND_REQUESTS,
    TABLE_FRIENDS,
    TABLE_PROFILES,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from .date_utils import parse_date
from .errors import ConflictError, InvalidInputError, NotFoundError, PermissionDeniedError
from .models import DayKind, DayPlan
from .row_store import RowStore

_LOGGER = logging.getLogger(__name__)

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_DECLINED = "declined"


def validate_username(value: Any) -> str:
    """Return the normalized username or raise InvalidInputError."""
    name = str(value or "").strip()
    if len(name) < USERNAME_MIN_LENGTH or len(name) > USERNAME_MAX_LENGTH:
        raise InvalidInputError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if not _USERNAME_RE.match(name):
        raise InvalidInputError("Username can only contain letters, numbers, underscores, and hyphens")
    return name.lower()


class SocialService:
    """Social graph operations on behalf of one user."""

    def __init__(self, rows: RowStore, user_id: str) -> None:
        self._rows = rows
        self.user_id = user_id

    async def async_get_profile(self) -> dict[str, Any] | None:
        found = await self._rows.async_select(TABLE_PROFILES, eq={"id": self.user_id}, limit=1)
        return found[0] if found else None

    async def async_set_username(self, username: str) -> dict[str, Any]:
        name = validate_username(username)
        taken = await self._rows.async_select(TABLE_PROFILES, eq={"username": name}, limit=1)
        if taken and taken[0].get("id") != self.user_id:
            raise ConflictError("This username is already taken", table=TABLE_PROFILES, keys=("username",), values=(name,))
        return await self._rows.async_upsert(
            TABLE_PROFILES,
            {"id": self.user_id, "username": name},
            on_conflict=("id",),
        )

    async def _async_usernames(self, user_ids: list[str]) -> dict[str, dict[str, Any]]:
        if not user_ids:
            return {}
        profiles = await self._rows.async_select(TABLE_PROFILES, in_={"id": user_ids})
        return {str(p["id"]): p for p in profiles}

    async def async_list_friends(self) -> list[dict[str, Any]]:
        rows = await self._rows.async_select(
            TABLE_FRIENDS,
            eq={"user_id": self.user_id},
            order_by="created_at",
            descending=True,
        )
        profiles = await self._async_usernames([str(r["friend_id"]) for r in rows])
        return [
            {
                "id": r["id"],
                "friend_id": r["friend_id"],
                "username": profiles.get(str(r["friend_id"]), {}).get("username"),
                "avatar_url": profiles.get(str(r["friend_id"]), {}).get("avatar_url"),
                "created_at": r.get("created_at"),
            }
            for r in rows
        ]

    async def _async_requests_between(self, other_id: str) -> list[dict[str, Any]]:
        sent = await self._rows.async_select(
            TABLE_FRIEND_REQUESTS, eq={"sender_id": self.user_id, "receiver_id": other_id}
        )
        received = await self._rows.async_select(
            TABLE_FRIEND_REQUESTS, eq={"sender_id": other_id, "receiver_id": self.user_id}
        )
        return [*sent, *received]

    async def async_send_request(self, username: str) -> dict[str, Any]:
        name = str(username or "").strip().lower()
        if not name:
            raise InvalidInputError("Username is required")
        found = await self._rows.async_select(TABLE_PROFILES, eq={"username": name}, limit=1)
        if not found:
            raise NotFoundError(f'Username "{name}" does not exist')
        other_id = str(found[0]["id"])
        if other_id == self.user_id:
            raise InvalidInputError("You cannot send a friend request to yourself")

        friends = await self._rows.async_select(
            TABLE_FRIENDS, eq={"user_id": self.user_id, "friend_id": other_id}, limit=1
        )
        if friends:
            raise ConflictError("This user is already in your friends list")

        for req in await self._async_requests_between(other_id):
            if req.get("status") != STATUS_PENDING:
                continue
            if req.get("sender_id") == self.user_id:
                raise ConflictError("You have already sent a friend request to this user")
            raise ConflictError("This user has already sent you a friend request")

        try:
            inserted = await self._rows.async_insert(
                TABLE_FRIEND_REQUESTS,
                [{"sender_id": self.user_id, "receiver_id": other_id, "status": STATUS_PENDING}],
            )
        except ConflictError as err:
            raise ConflictError("A friend request already exists between you and this user") from err
        _LOGGER.debug("Friend request %s sent from %s to %s", inserted[0]["id"], self.user_id, other_id)
        return inserted[0]

    async def async_pending_requests(self) -> list[dict[str, Any]]:
        rows = await self._rows.async_select(
            TABLE_FRIEND_REQUESTS,
            eq={"receiver_id": self.user_id, "status": STATUS_PENDING},
            order_by="created_at",
            descending=True,
        )
        profiles = await self._async_usernames([str(r["sender_id"]) for r in rows])
        return [
            {
                "id": r["id"],
                "sender_id": r["sender_id"],
                "sender_username": profiles.get(str(r["sender_id"]), {}).get("username"),
                "status": r["status"],
                "created_at": r.get("created_at"),
            }
            for r in rows
        ]

    async def _async_pending_for_me(self, request_id: str) -> dict[str, Any]:
        found = await self._rows.async_select(TABLE_FRIEND_REQUESTS, eq={"id": str(request_id)}, limit=1)
        if not found:
            raise NotFoundError(f"Friend request {request_id} does not exist")
        request = found[0]
        if request.get("receiver_id") != self.user_id:
            raise PermissionDeniedError("You are not the receiver of this request")
        if request.get("status") != STATUS_PENDING:
            raise NotFoundError(f"Friend request {request_id} is no longer pending")
        return request

    async def async_accept(self, request_id: str) -> None:
        """Accept a request: friendship in both directions, then drop the requests."""
        request = await self._async_pending_for_me(request_id)
        sender_id = str(request["sender_id"])
        await self._rows.async_update(TABLE_FRIEND_REQUESTS, {"status": STATUS_ACCEPTED}, eq={"id": request["id"]})
        for user_id, friend_id in ((self.user_id, sender_id), (sender_id, self.user_id)):
            await self._rows.async_upsert(
                TABLE_FRIENDS,
                {"user_id": user_id, "friend_id": friend_id},
                on_conflict=("user_id", "friend_id"),
                ignore_duplicates=True,
            )
        for req in await self._async_requests_between(sender_id):
            await self._rows.async_delete(TABLE_FRIEND_REQUESTS, eq={"id": req["id"]})
        _LOGGER.debug("Friend request %s accepted by %s", request_id, self.user_id)

    async def async_decline(self, request_id: str) -> None:
        request = await self._async_pending_for_me(request_id)
        await self._rows.async_update(TABLE_FRIEND_REQUESTS, {"status": STATUS_DECLINED}, eq={"id": request["id"]})

    async def async_remove_friend(self, friend_id: str) -> None:
        await self._rows.async_delete(TABLE_FRIENDS, eq={"user_id": self.user_id, "friend_id": str(friend_id)})
        await self._rows.async_delete(TABLE_FRIENDS, eq={"user_id": str(friend_id), "friend_id": self.user_id})

    async def async_friends_workouts(self, day: date | str) -> list[dict[str, Any]]:
        """Friends' planned workouts on one date."""
        friends = await self.async_list_friends()
        if not friends:
            return []
        by_id = {str(f["friend_id"]): f for f in friends}
        rows = await self._rows.async_select(
            TABLE_DAYS,
            eq={"date": parse_date(day).isoformat(), "type": str(DayKind.WORKOUT)},
            in_={"owner_id": list(by_id)},
        )
        result: list[dict[str, Any]] = []
        for row in rows:
            plan = DayPlan.from_row(row)
            friend = by_id.get(plan.owner_id, {})
            result.append(
                {
                    "friend_id": plan.owner_id,
                    "username": friend.get("username"),
                    "avatar_url": friend.get("avatar_url"),
                    **plan.as_dict(),
                }
            )
        return result
