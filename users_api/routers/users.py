from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from users_api.domain.users import (
    ErrorKind,
    User,
    UserError,
    parse_min_age,
    parse_new_user,
    parse_user_id,
    parse_user_update,
)
from users_api.services.user_service import UserService

router = APIRouter(prefix="/user", tags=["users"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
PAYLOAD_TOO_LARGE = UserError(ErrorKind.TOO_LARGE, "Payload too large")


def _get_user_service(request: Request) -> UserService:
    svc = getattr(getattr(request.app, "state", None), "user_service", None)
    if not svc:
        raise RuntimeError("UserService not configured")
    return svc


def _error_response(err: UserError) -> JSONResponse:
    return JSONResponse({"message": err.message}, status_code=err.status_code)


def _user_payload(user: User) -> dict:
    return user.to_dict()


async def _read_limited_body(request: Request) -> bytes | UserError:
    settings = getattr(request.app.state, "settings", None)
    limit = settings.max_body_bytes if settings else None
    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if limit is not None and size > limit:
            return PAYLOAD_TOO_LARGE
        chunks.append(chunk)
    return b"".join(chunks)


async def _read_payload(request: Request) -> Any:
    """Decode a JSON or form-encoded body; form values arrive as strings."""
    raw = await _read_limited_body(request)
    if isinstance(raw, UserError):
        return raw
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in FORM_CONTENT_TYPES:
        async def _replay() -> dict:
            return {"type": "http.request", "body": raw, "more_body": False}

        form = await Request(request.scope, _replay).form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return UserError(ErrorKind.BAD_REQUEST, "Malformed JSON body")


@router.get("")
def list_users(request: Request):
    users = _get_user_service(request).list_users()
    return [_user_payload(user) for user in users]


@router.get("/getByName")
def get_user_by_name(request: Request, name: str | None = None):
    result = _get_user_service(request).find_by_name(name)
    if isinstance(result, UserError):
        return _error_response(result)
    return _user_payload(result)


@router.get("/filter")
def filter_users(request: Request, minAge: str | None = None):
    min_age = parse_min_age(minAge)
    if isinstance(min_age, UserError):
        return _error_response(min_age)
    result = _get_user_service(request).filter_by_min_age(min_age)
    if isinstance(result, UserError):
        return _error_response(result)
    return [_user_payload(user) for user in result]


@router.get("/{user_id}")
def get_user(user_id: str, request: Request):
    parsed_id = parse_user_id(user_id)
    if isinstance(parsed_id, UserError):
        return _error_response(parsed_id)
    result = _get_user_service(request).get_user(parsed_id)
    if isinstance(result, UserError):
        return _error_response(result)
    return _user_payload(result)


@router.post("")
async def create_user(request: Request):
    payload = await _read_payload(request)
    if isinstance(payload, UserError):
        return _error_response(payload)
    data = parse_new_user(payload)
    if isinstance(data, UserError):
        return _error_response(data)
    result = _get_user_service(request).create_user(data)
    if isinstance(result, UserError):
        return _error_response(result)
    return JSONResponse(
        {"message": "User created successfully", "user": _user_payload(result)},
        status_code=201,
    )


@router.patch("/{user_id}")
async def update_user(user_id: str, request: Request):
    parsed_id = parse_user_id(user_id)
    if isinstance(parsed_id, UserError):
        return _error_response(parsed_id)
    payload = await _read_payload(request)
    if isinstance(payload, UserError):
        return _error_response(payload)
    changes = parse_user_update(payload)
    if isinstance(changes, UserError):
        return _error_response(changes)
    result = _get_user_service(request).update_user(parsed_id, changes)
    if isinstance(result, UserError):
        return _error_response(result)
    return {"message": "User updated successfully", "user": _user_payload(result)}


@router.delete("/{user_id}")
def delete_user(user_id: str, request: Request):
    parsed_id = parse_user_id(user_id)
    if isinstance(parsed_id, UserError):
        return _error_response(parsed_id)
    result = _get_user_service(request).delete_user(parsed_id)
    if isinstance(result, UserError):
        return _error_response(result)
    return {"message": "User deleted successfully"}
