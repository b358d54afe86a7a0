"""Websocket API for Workout Days."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant.components import websocket_api
from homeassistant.core import HomeAssistant

from .const import DOMAIN
from .coordinator import WorkoutDaysCoordinator
from .date_utils import parse_date
from .day_manager import TrainerDayManager, UserDayManager
from .errors import InvalidInputError, WorkoutDaysError
from .models import DayPlan
from .ws_state import public_state, runtime_payload

_OWNER_SCHEMA = {
    vol.Required("entry_id"): str,
    vol.Optional("trainer"): str,
}


def _coordinator(
    hass: HomeAssistant, connection: websocket_api.ActiveConnection, msg: dict[str, Any]
) -> WorkoutDaysCoordinator | None:
    entry_id = msg["entry_id"]
    coordinator = hass.data.get(DOMAIN, {}).get(entry_id)
    if coordinator is None:
        connection.send_error(msg["id"], "entry_not_found", f"No entry found for entry_id={entry_id}")
    return coordinator


def _send_error(connection: websocket_api.ActiveConnection, msg: dict[str, Any], err: WorkoutDaysError) -> None:
    connection.send_error(msg["id"], err.code, str(err))


async def _manager(
    coordinator: WorkoutDaysCoordinator, connection: websocket_api.ActiveConnection, msg: dict[str, Any]
) -> UserDayManager | TrainerDayManager:
    return await coordinator.async_owner_manager(user_id=connection.user.id, trainer=msg.get("trainer"))


def _send_state(
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
    manager: UserDayManager | TrainerDayManager,
    **extra: Any,
) -> None:
    connection.send_result(
        msg["id"],
        {
            "entry_id": msg["entry_id"],
            "state": public_state(manager.state(), runtime=runtime_payload()),
            **extra,
        },
    )


@websocket_api.websocket_command({vol.Required("type"): "workout_days/list_entries"})
@websocket_api.async_response
async def ws_list_entries(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    entries = hass.config_entries.async_entries(DOMAIN)
    payload = []
    for entry in entries:
        coordinator = hass.data.get(DOMAIN, {}).get(entry.entry_id)
        payload.append(
            {
                "entry_id": entry.entry_id,
                "title": entry.title,
                "variant": coordinator.variant if coordinator else None,
                "trainers": coordinator.trainer_names if coordinator else [],
            }
        )
    connection.send_result(msg["id"], {"entries": payload})


@websocket_api.websocket_command({vol.Required("type"): "workout_days/get_days", **_OWNER_SCHEMA})
@websocket_api.async_response
async def ws_get_days(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        manager = await _manager(coordinator, connection, msg)
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    _send_state(connection, msg, manager)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/jump_to_date",
        vol.Required("entry_id"): str,
        vol.Required("date"): str,
    }
)
@websocket_api.async_response
async def ws_jump_to_date(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        manager = await coordinator.async_user_manager(connection.user.id)
        target = parse_date(msg["date"])
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    await manager.async_jump_to(target)
    _send_state(connection, msg, manager)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/load_previous_week",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_load_previous_week(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    manager = await coordinator.async_user_manager(connection.user.id)
    await manager.async_load_previous_week()
    _send_state(connection, msg, manager)


@websocket_api.websocket_command({vol.Required("type"): "workout_days/load_more_days", **_OWNER_SCHEMA})
@websocket_api.async_response
async def ws_load_more_days(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        manager = await _manager(coordinator, connection, msg)
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    await manager.async_load_more_display()
    _send_state(connection, msg, manager)


@websocket_api.websocket_command({vol.Required("type"): "workout_days/add_day", **_OWNER_SCHEMA})
@websocket_api.async_response
async def ws_add_day(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        manager = await _manager(coordinator, connection, msg)
        day = await manager.async_add_next_day()
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    _send_state(connection, msg, manager, day=day.as_dict())


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/save_day",
        **_OWNER_SCHEMA,
        vol.Required("day"): dict,
    }
)
@websocket_api.async_response
async def ws_save_day(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        manager = await _manager(coordinator, connection, msg)
        day = await manager.async_save_day(DayPlan.from_form(msg["day"], owner_id=manager.owner_id))
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    _send_state(connection, msg, manager, day=day.as_dict())


async def _async_toggle(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
    *,
    missed: bool,
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        manager = await _manager(coordinator, connection, msg)
        if missed:
            day = await manager.async_toggle_missed(str(msg["day_id"]))
        else:
            day = await manager.async_toggle_complete(str(msg["day_id"]))
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    if day is None:
        connection.send_error(msg["id"], "not_found", f"No loaded day with id={msg['day_id']}")
        return
    _send_state(connection, msg, manager, day=day.as_dict())


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/toggle_complete",
        **_OWNER_SCHEMA,
        vol.Required("day_id"): str,
    }
)
@websocket_api.async_response
async def ws_toggle_complete(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_toggle(hass, connection, msg, missed=False)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/toggle_missed",
        **_OWNER_SCHEMA,
        vol.Required("day_id"): str,
    }
)
@websocket_api.async_response
async def ws_toggle_missed(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_toggle(hass, connection, msg, missed=True)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/get_archive",
        vol.Required("entry_id"): str,
        vol.Required("trainer"): str,
    }
)
@websocket_api.async_response
async def ws_get_archive(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        view = await coordinator.async_archive_view(msg["trainer"])
        days = await view.async_fetch()
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "days": [d.as_dict() for d in days]})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/delete_archived_day",
        vol.Required("entry_id"): str,
        vol.Required("trainer"): str,
        vol.Required("day_id"): str,
    }
)
@websocket_api.async_response
async def ws_delete_archived_day(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        view = await coordinator.async_archive_view(msg["trainer"])
        await view.async_delete(msg["day_id"])
        days = await view.async_fetch()
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "days": [d.as_dict() for d in days]})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/get_competition",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_get_competition(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    for name in coordinator.trainer_names:
        await coordinator.async_trainer_manager(name)
    competition = coordinator.competition()
    connection.send_result(
        msg["id"],
        {
            "entry_id": msg["entry_id"],
            "trainers": coordinator.trainer_names,
            "competition": competition.as_dict() if competition else None,
        },
    )


async def _weight_owner(
    coordinator: WorkoutDaysCoordinator, connection: websocket_api.ActiveConnection, msg: dict[str, Any]
) -> str:
    if msg.get("trainer"):
        manager = await coordinator.async_trainer_manager(msg["trainer"])
        return await manager.async_resolve_owner()
    return connection.user.id


@websocket_api.websocket_command({vol.Required("type"): "workout_days/get_weight", **_OWNER_SCHEMA})
@websocket_api.async_response
async def ws_get_weight(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        tracker = await coordinator.async_weight_tracker(await _weight_owner(coordinator, connection, msg))
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "weight": tracker.state()})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/log_weight",
        **_OWNER_SCHEMA,
        vol.Required("weight"): vol.Coerce(float),
        vol.Optional("date"): str,
        vol.Optional("notes"): str,
    }
)
@websocket_api.async_response
async def ws_log_weight(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        tracker = await coordinator.async_weight_tracker(await _weight_owner(coordinator, connection, msg))
        await tracker.async_log(msg["weight"], msg.get("date"), msg.get("notes"))
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "weight": tracker.state()})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/delete_weight",
        **_OWNER_SCHEMA,
        vol.Required("weight_id"): str,
    }
)
@websocket_api.async_response
async def ws_delete_weight(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        tracker = await coordinator.async_weight_tracker(await _weight_owner(coordinator, connection, msg))
        await tracker.async_delete(msg["weight_id"])
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "weight": tracker.state()})


async def _social_payload(coordinator: WorkoutDaysCoordinator, user_id: str) -> dict[str, Any]:
    social = coordinator.social(user_id)
    return {
        "profile": await social.async_get_profile(),
        "friends": await social.async_list_friends(),
        "pending_requests": await social.async_pending_requests(),
    }


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/get_social",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_get_social(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    payload = await _social_payload(coordinator, connection.user.id)
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], **payload})


async def _async_social_call(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
    action: str,
    value: str,
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    social = coordinator.social(connection.user.id)
    try:
        await getattr(social, action)(value)
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    payload = await _social_payload(coordinator, connection.user.id)
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], **payload})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/set_username",
        vol.Required("entry_id"): str,
        vol.Required("username"): str,
    }
)
@websocket_api.async_response
async def ws_set_username(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_social_call(hass, connection, msg, "async_set_username", msg["username"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/send_friend_request",
        vol.Required("entry_id"): str,
        vol.Required("username"): str,
    }
)
@websocket_api.async_response
async def ws_send_friend_request(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_social_call(hass, connection, msg, "async_send_request", msg["username"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/accept_friend_request",
        vol.Required("entry_id"): str,
        vol.Required("request_id"): str,
    }
)
@websocket_api.async_response
async def ws_accept_friend_request(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_social_call(hass, connection, msg, "async_accept", msg["request_id"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/decline_friend_request",
        vol.Required("entry_id"): str,
        vol.Required("request_id"): str,
    }
)
@websocket_api.async_response
async def ws_decline_friend_request(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_social_call(hass, connection, msg, "async_decline", msg["request_id"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/remove_friend",
        vol.Required("entry_id"): str,
        vol.Required("friend_id"): str,
    }
)
@websocket_api.async_response
async def ws_remove_friend(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_social_call(hass, connection, msg, "async_remove_friend", msg["friend_id"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/get_friends_workouts",
        vol.Required("entry_id"): str,
        vol.Required("date"): str,
    }
)
@websocket_api.async_response
async def ws_get_friends_workouts(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        workouts = await coordinator.social(connection.user.id).async_friends_workouts(msg["date"])
    except InvalidInputError as err:
        _send_error(connection, msg, err)
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "workouts": workouts})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/get_feed",
        vol.Required("entry_id"): str,
        vol.Optional("page", default=0): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)
@websocket_api.async_response
async def ws_get_feed(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    feed = await coordinator.feed(connection.user.id).async_friends_feed(msg["page"])
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], **feed})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/get_my_feed",
        vol.Required("entry_id"): str,
        vol.Optional("page", default=0): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)
@websocket_api.async_response
async def ws_get_my_feed(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    feed = await coordinator.feed(connection.user.id).async_my_feed(msg["page"])
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], **feed})


async def _async_feed_call(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
    key: str,
    action: str,
    *args: str,
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    feed = coordinator.feed(connection.user.id)
    try:
        result = await getattr(feed, action)(*args)
    except WorkoutDaysError as err:
        _send_error(connection, msg, err)
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], key: result})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/toggle_activity_like",
        vol.Required("entry_id"): str,
        vol.Required("activity_id"): str,
    }
)
@websocket_api.async_response
async def ws_toggle_activity_like(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_feed_call(hass, connection, msg, "liked", "async_toggle_like", msg["activity_id"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/add_comment",
        vol.Required("entry_id"): str,
        vol.Required("activity_id"): str,
        vol.Required("comment"): str,
    }
)
@websocket_api.async_response
async def ws_add_comment(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_feed_call(hass, connection, msg, "comment", "async_add_comment", msg["activity_id"], msg["comment"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/update_comment",
        vol.Required("entry_id"): str,
        vol.Required("comment_id"): str,
        vol.Required("comment"): str,
    }
)
@websocket_api.async_response
async def ws_update_comment(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_feed_call(hass, connection, msg, "comment", "async_update_comment", msg["comment_id"], msg["comment"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/delete_comment",
        vol.Required("entry_id"): str,
        vol.Required("comment_id"): str,
    }
)
@websocket_api.async_response
async def ws_delete_comment(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_feed_call(hass, connection, msg, "comment", "async_delete_comment", msg["comment_id"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_days/toggle_comment_like",
        vol.Required("entry_id"): str,
        vol.Required("comment_id"): str,
    }
)
@websocket_api.async_response
async def ws_toggle_comment_like(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    await _async_feed_call(hass, connection, msg, "liked", "async_toggle_comment_like", msg["comment_id"])


def async_register(hass: HomeAssistant) -> None:
    websocket_api.async_register_command(hass, ws_list_entries)
    websocket_api.async_register_command(hass, ws_get_days)
    websocket_api.async_register_command(hass, ws_jump_to_date)
    websocket_api.async_register_command(hass, ws_load_previous_week)
    websocket_api.async_register_command(hass, ws_load_more_days)
    websocket_api.async_register_command(hass, ws_add_day)
    websocket_api.async_register_command(hass, ws_save_day)
    websocket_api.async_register_command(hass, ws_toggle_complete)
    websocket_api.async_register_command(hass, ws_toggle_missed)
    websocket_api.async_register_command(hass, ws_get_archive)
    websocket_api.async_register_command(hass, ws_delete_archived_day)
    websocket_api.async_register_command(hass, ws_get_competition)
    websocket_api.async_register_command(hass, ws_get_weight)
    websocket_api.async_register_command(hass, ws_log_weight)
    websocket_api.async_register_command(hass, ws_delete_weight)
    websocket_api.async_register_command(hass, ws_get_social)
    websocket_api.async_register_command(hass, ws_set_username)
    websocket_api.async_register_command(hass, ws_send_friend_request)
    websocket_api.async_register_command(hass, ws_accept_friend_request)
    websocket_api.async_register_command(hass, ws_decline_friend_request)
    websocket_api.async_register_command(hass, ws_remove_friend)
    websocket_api.async_register_command(hass, ws_get_friends_workouts)
    websocket_api.async_register_command(hass, ws_get_feed)
    websocket_api.async_register_command(hass, ws_get_my_feed)
    websocket_api.async_register_command(hass, ws_toggle_activity_like)
    websocket_api.async_register_command(hass, ws_add_comment)
    websocket_api.async_register_command(hass, ws_update_comment)
    websocket_api.async_register_command(hass, ws_delete_comment)
    websocket_api.async_register_command(hass, ws_toggle_comment_like)
