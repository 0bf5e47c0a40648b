"""Domain helpers for user records: the record type and payload validation.

Everything here is pure. Validation functions return either the parsed
value or a ``UserError`` describing why the input was rejected, and the
routers translate the error kind into an HTTP status.
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# bounded so int() never sees a digit string past its conversion limit
_INTEGER_PATTERN = re.compile(r"[+-]?\d{1,18}")


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TOO_LARGE = "too_large"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.INVALID: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.TOO_LARGE: 413,
}


@dataclass(frozen=True)
class UserError:
    """A rejected request: malformed input, invalid payload, missing record or email clash."""

    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return self.kind.status_code


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    age: int

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "User":
        """Build a record from its stored form, raising ValueError on schema mismatch."""
        if not isinstance(data, Mapping):
            raise ValueError(f"user record must be an object, got {type(data).__name__}")
        values = {}
        for field, expected in (("id", int), ("name", str), ("email", str), ("age", int)):
            if field not in data:
                raise ValueError(f"user record is missing '{field}'")
            value = data[field]
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ValueError(f"user field '{field}' must be {expected.__name__}")
            values[field] = value
        return cls(**values)


@dataclass(frozen=True)
class NewUser:
    name: str
    email: str
    age: int


@dataclass(frozen=True)
class UserUpdate:
    """Partial update: ``None`` means the field was not provided."""

    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None

    def is_empty(self) -> bool:
        return self.name is None and self.email is None and self.age is None

    def apply(self, user: User) -> User:
        changes = {key: value for key, value in asdict(self).items() if value is not None}
        return replace(user, **changes)


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.match(value))


def is_valid_age(value: Any) -> bool:
    """Return True for positive integers (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def same_email(left: str, right: str) -> bool:
    return (left or "").strip().lower() == (right or "").strip().lower()


# ------------------------------------------------------------------ sanitising
_AGE_ERROR = UserError(ErrorKind.INVALID, "Age must be a positive integer")


def _clean_text(value: Any, field: str, *, lower: bool = False) -> str | None | UserError:
    if value is None:
        return None
    if not isinstance(value, str):
        return UserError(ErrorKind.INVALID, f"{field.capitalize()} must be a string")
    text = value.strip()
    if lower:
        text = text.lower()
    return text or None


def _clean_age(value: Any) -> int | None | UserError:
    if value is None:
        return None
    if isinstance(value, bool):
        return _AGE_ERROR
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else _AGE_ERROR
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if not _INTEGER_PATTERN.fullmatch(text):
            return _AGE_ERROR
        return int(text)
    return _AGE_ERROR


def _sanitize(payload: Any) -> tuple[Optional[str], Optional[str], Optional[int]] | UserError:
    if not isinstance(payload, Mapping):
        return UserError(ErrorKind.BAD_REQUEST, "Request body must be an object")
    cleaned = (
        _clean_text(payload.get("name"), "name"),
        _clean_text(payload.get("email"), "email", lower=True),
        _clean_age(payload.get("age")),
    )
    for value in cleaned:
        if isinstance(value, UserError):
            return value
    return cleaned  # type: ignore[return-value]


# ------------------------------------------------------------------ parsers
def parse_new_user(payload: Any) -> NewUser | UserError:
    """Validate a creation payload: name, email and age are all required."""
    cleaned = _sanitize(payload)
    if isinstance(cleaned, UserError):
        return cleaned
    name, email, age = cleaned
    if name is None or email is None or age is None:
        return UserError(ErrorKind.INVALID, "Name, email and age are required")
    if not is_valid_email(email):
        return UserError(ErrorKind.INVALID, "Invalid email format")
    if not is_valid_age(age):
        return _AGE_ERROR
    return NewUser(name=name, email=email, age=age)


def parse_user_update(payload: Any) -> UserUpdate | UserError:
    """Validate a partial update; at least one of name/email/age must be present.

    An explicit ``age`` of 0 counts as provided and is rejected like any other
    non-positive age.
    """
    cleaned = _sanitize(payload)
    if isinstance(cleaned, UserError):
        return cleaned
    name, email, age = cleaned
    update = UserUpdate(name=name, email=email, age=age)
    if update.is_empty():
        return UserError(ErrorKind.INVALID, "At least one of name, email or age must be provided")
    if email is not None and not is_valid_email(email):
        return UserError(ErrorKind.INVALID, "Invalid email format")
    if age is not None and not is_valid_age(age):
        return _AGE_ERROR
    return update


def parse_user_id(raw: Any) -> int | UserError:
    text = str(raw if raw is not None else "").strip()
    if not _INTEGER_PATTERN.fullmatch(text):
        return UserError(ErrorKind.BAD_REQUEST, "Invalid user id")
    return int(text)


def parse_min_age(raw: str | None) -> int | UserError:
    text = (raw or "").strip()
    if not text:
        return UserError(ErrorKind.BAD_REQUEST, "minAge query parameter is required")
    if not _INTEGER_PATTERN.fullmatch(text) or int(text) < 0:
        return UserError(ErrorKind.BAD_REQUEST, "minAge must be a non-negative integer")
    return int(text)
