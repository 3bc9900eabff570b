# jobjournal/services/registration.py
"""Username / password rules applied on registration and account edits.

Checks run in a fixed order and the first failure wins: missing field,
wrong type, surrounding whitespace, then length (too short is reported
before too long across all fields).
"""
from typing import Any, Dict, Iterable, Optional

from jobjournal.core.config import settings
from jobjournal.core.errors import FieldValidationError

CREDENTIAL_FIELDS = ("username", "password")


def _first(fields: Iterable[str], predicate) -> Optional[str]:
    return next((f for f in fields if predicate(f)), None)


def validate_credentials(
    payload: Dict[str, Any],
    required: Iterable[str] = CREDENTIAL_FIELDS,
    sized_fields: Optional[Dict[str, Dict[str, int]]] = None,
) -> None:
    """Raise FieldValidationError for the first rule ``payload`` breaks.

    ``required`` fields must be present; every credential field that is
    present gets the type, whitespace and length checks.
    """
    required = tuple(required)
    sized = sized_fields if sized_fields is not None else settings.sized_fields

    missing = _first(required, lambda f: f not in payload)
    if missing:
        raise FieldValidationError("Missing field", missing)

    present = tuple(f for f in CREDENTIAL_FIELDS if f in payload)

    non_string = _first(present, lambda f: not isinstance(payload[f], str))
    if non_string:
        raise FieldValidationError("Incorrect field type: expected string", non_string)

    non_trimmed = _first(present, lambda f: payload[f].strip() != payload[f])
    if non_trimmed:
        raise FieldValidationError("Cannot start or end with whitespace", non_trimmed)

    bounded = tuple(f for f in present if f in sized)
    too_small = _first(bounded, lambda f: "min" in sized[f] and len(payload[f]) < sized[f]["min"])
    if too_small:
        raise FieldValidationError(
            "Must be at least {} characters long".format(sized[too_small]["min"]), too_small
        )
    too_large = _first(bounded, lambda f: "max" in sized[f] and len(payload[f]) > sized[f]["max"])
    if too_large:
        raise FieldValidationError(
            "Must be at most {} characters long".format(sized[too_large]["max"]), too_large
        )


def username_taken_error() -> FieldValidationError:
    return FieldValidationError("Username already taken", "username")
