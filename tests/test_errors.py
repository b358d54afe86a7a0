from __future__ import annotations

from custom_components.workout_days.errors import (
    ConflictError,
    PermissionDeniedError,
    SchemaError,
    StorageUnavailableError,
    WorkoutDaysError,
    classify_storage_error,
)


def test_network_errors_are_unavailable() -> None:
    assert isinstance(classify_storage_error(OSError("connection reset")), StorageUnavailableError)
    assert isinstance(classify_storage_error(TimeoutError()), StorageUnavailableError)


def test_missing_owner_column_is_schema_error() -> None:
    err = classify_storage_error(RuntimeError('column "owner_id" does not exist'))
    assert isinstance(err, SchemaError)
    assert err.code == "schema_error"


def test_policy_rejection_is_permission_error() -> None:
    err = classify_storage_error(RuntimeError("new row violates row-level security policy"))
    assert isinstance(err, PermissionDeniedError)


def test_known_errors_pass_through() -> None:
    original = ConflictError(table="days", keys=("owner_id", "date"), values=("u1", "2024-01-01"))
    assert classify_storage_error(original) is original
    assert "owner_id=u1" in str(original)


def test_other_errors_keep_message() -> None:
    err = classify_storage_error(ValueError("boom"))
    assert type(err) is WorkoutDaysError
    assert str(err) == "boom"
