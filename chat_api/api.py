import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import crud, schemas
from .deps import get_db
from .responses import success

logger = logging.getLogger(__name__)

router = APIRouter()

ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]

# Ids are stored as signed 64-bit integers
ID_MIN, ID_MAX = -2 ** 63, 2 ** 63 - 1


def parse_numeric(value: Any) -> Optional[int]:
    """Integer value of a numeric string or number, or None."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        try:
            number = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return None
    if not ID_MIN <= number <= ID_MAX:
        return None
    return number


async def read_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def method_not_allowed(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail=f"Method not allowed for /{action}",
    )


async def handle_rooms(request: Request, db: AsyncSession) -> JSONResponse:
    if request.method == "GET":
        rooms = await crud.get_rooms(db)
        return success([schemas.Room.model_validate(room) for room in rooms])

    if request.method == "POST":
        try:
            room_in = schemas.RoomCreate.model_validate(await read_body(request))
        except ValidationError:
            raise HTTPException(status_code=400, detail="Room name and user ID are required.")

        if await crud.get_room_by_name(db, room_in.name):
            raise HTTPException(status_code=409, detail="Room name already exists.")

        try:
            room = await crud.create_room(db, name=room_in.name, user_id=room_in.user_id)
        except crud.UniqueViolation:
            logger.info("Lost race creating room %r", room_in.name)
            raise HTTPException(status_code=409, detail="Room name already exists.")
        except SQLAlchemyError as exc:
            logger.exception("Failed to create room %r", room_in.name)
            raise HTTPException(status_code=500, detail=f"Failed to create room: {exc}")
        return success(schemas.Room.model_validate(room))

    raise method_not_allowed("rooms")


async def handle_profile(request: Request, db: AsyncSession) -> JSONResponse:
    if request.method == "GET":
        user_id = request.query_params.get("user_id", "")
        if schemas.is_empty(user_id):
            raise HTTPException(status_code=400, detail="User ID is required.")
        user = await crud.get_user(db, user_id=user_id)
        # A missing profile is a valid "not set yet" state
        return success(schemas.Profile.model_validate(user) if user else schemas.Profile())

    if request.method == "POST":
        try:
            profile_in = schemas.ProfileUpdate.model_validate(await read_body(request))
        except ValidationError:
            raise HTTPException(status_code=400, detail="User ID and Display Name are required.")

        taken = await crud.get_other_user_by_display_name(
            db, display_name=profile_in.display_name, user_id=profile_in.user_id
        )
        if taken:
            raise HTTPException(status_code=409, detail="Display name already taken.")

        try:
            user = await crud.upsert_user(
                db, user_id=profile_in.user_id, display_name=profile_in.display_name
            )
        except crud.UniqueViolation:
            logger.info("Lost race claiming display name %r", profile_in.display_name)
            raise HTTPException(status_code=409, detail="Display name already taken.")
        except SQLAlchemyError as exc:
            logger.exception("Failed to set display name for %r", profile_in.user_id)
            raise HTTPException(status_code=500, detail=f"Failed to set display name: {exc}")
        return success(schemas.Profile.model_validate(user))

    raise method_not_allowed("profile")


async def handle_messages(request: Request, db: AsyncSession) -> JSONResponse:
    if request.method == "GET":
        room_id = parse_numeric(request.query_params.get("room_id"))
        if room_id is None:
            raise HTTPException(status_code=400, detail="Invalid room ID.")
        last_id = parse_numeric(request.query_params.get("last_id")) or 0
        messages = await crud.get_messages_for_room(db, room_id=room_id, last_id=last_id)
        return success([schemas.Message.model_validate(message) for message in messages])

    if request.method == "POST":
        body = await read_body(request)
        # room_id may arrive as a number or a numeric string
        body["room_id"] = parse_numeric(body.get("room_id"))
        try:
            message_in = schemas.MessageCreate.model_validate(body)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Missing message data.")

        try:
            message = await crud.create_message(
                db,
                room_id=message_in.room_id,
                user_id=message_in.user_id,
                user_name=message_in.user_name,
                message_text=message_in.message_text,
            )
        except SQLAlchemyError as exc:
            logger.exception("Failed to send message to room %s", message_in.room_id)
            raise HTTPException(status_code=500, detail=f"Failed to send message: {exc}")
        return success(schemas.MessageCreated(id=message.id))

    raise method_not_allowed("messages")


ACTIONS = {
    "rooms": handle_rooms,
    "profile": handle_profile,
    "messages": handle_messages,
}


@router.api_route("/api", methods=ROUTED_METHODS)
@router.api_route("/api.php", methods=ROUTED_METHODS, include_in_schema=False)
async def dispatch(request: Request, db: AsyncSession = Depends(get_db)):
    handler = ACTIONS.get(request.query_params.get("action", ""))
    if handler is None:
        raise HTTPException(status_code=404, detail="Invalid API action.")
    return await handler(request, db)
