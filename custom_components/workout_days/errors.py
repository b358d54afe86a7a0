"""Error taxonomy for Workout Days.

Every failure the core reports is one of these:
- StorageUnavailableError: the row store could not be reached or loaded
- SchemaError / PermissionDeniedError: the backing tables are not set up the
  way the core expects, or row access was refused
- InvalidInputError: rejected before any write is attempted
- NotFoundError / ConflictError: lookups that miss and unique-key races
"""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class WorkoutDaysError(HomeAssistantError):
    """Base error for the integration."""

    code = "unknown_error"


class StorageUnavailableError(WorkoutDaysError):
    """Raised when the row store cannot be reached."""

    code = "unavailable"


class SchemaError(WorkoutDaysError):
    """Raised when a table is missing a column the core relies on."""

    code = "schema_error"


class PermissionDeniedError(WorkoutDaysError):
    """Raised when row access is refused."""

    code = "unauthorized"


class InvalidInputError(WorkoutDaysError):
    """Raised for input rejected before any write."""

    code = "invalid_format"


class NotFoundError(WorkoutDaysError):
    """Raised when a referenced row does not exist."""

    code = "not_found"


class ConflictError(WorkoutDaysError):
    """Raised when a write collides with an existing row."""

    code = "conflict"

    def __init__(
        self,
        message: str | None = None,
        *,
        table: str = "",
        keys: tuple[str, ...] = (),
        values: tuple[object, ...] = (),
    ) -> None:
        if message is None:
            joined = ", ".join(f"{k}={v}" for k, v in zip(keys, values))
            message = f"Duplicate row in {table} ({joined})"
        super().__init__(message)
        self.table = table
        self.keys = keys
        self.values = values


def classify_storage_error(err: BaseException) -> WorkoutDaysError:
    """Map a raw backend failure onto the taxonomy."""
    if isinstance(err, WorkoutDaysError):
        return err
    if isinstance(err, (OSError, TimeoutError)):
        return StorageUnavailableError(f"Storage unreachable: {err}")

    message = str(err) or err.__class__.__name__
    lowered = message.lower()
    if "column" in lowered and "owner_id" in lowered:
        return SchemaError(
            "Storage migration required: the owner_id column does not exist. "
            f"Original error: {message}"
        )
    if "permission" in lowered or "policy" in lowered or "rls" in lowered:
        return PermissionDeniedError(
            "Storage permission error: row access rules refused the request. "
            f"Original error: {message}"
        )
    return WorkoutDaysError(message)
