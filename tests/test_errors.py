"""Tests for the SDK error types."""

from twintag.core.common import (
    BagNotCreatedError,
    ErrorKind,
    ErrorValue,
    TwintagError,
    ViewNotInProjectError,
)


def test_from_entries_uses_first_entry() -> None:
    entries = [ErrorValue(status=409, title="Conflict", detail="exists"), ErrorValue(title="Other")]

    err = TwintagError.from_entries(entries, status_code=409)

    assert err.message == "exists"
    assert err.name == "Conflict"
    assert err.status == 409
    assert len(err.errors) == 2
    assert str(err) == "exists"


def test_from_entries_without_entries_is_generic() -> None:
    err = TwintagError.from_entries([], status_code=503)

    assert err.message == TwintagError.GENERIC_MESSAGE
    assert err.name == TwintagError.GENERIC_NAME
    assert err.status == 503
    assert err.kind == ErrorKind.RESPONSE


def test_set_message_keeps_entries() -> None:
    err = TwintagError.from_entries([ErrorValue(status=500, title="T", detail="D")])

    err.set_message("failed to get twintag data")

    assert str(err) == "failed to get twintag data"
    assert err.args == ("failed to get twintag data",)
    assert err.errors[0].detail == "D"


def test_resource_state_errors_are_twintag_errors() -> None:
    assert isinstance(BagNotCreatedError("delete"), TwintagError)
    assert str(BagNotCreatedError("delete")) == "bag delete; bag not created"
    assert str(ViewNotInProjectError()) == "view not tagged to any project"
