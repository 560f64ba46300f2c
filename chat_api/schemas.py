from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from typing import Optional
import datetime

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_empty(value) -> bool:
    """Blank or the string "0", as the legacy endpoint treated them."""
    return not value or value == "0"


def _required(value: str) -> str:
    if is_empty(value):
        raise ValueError("must not be empty")
    return value


# Room Schemas
class RoomCreate(BaseModel):
    name: str
    user_id: str
    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _required(v.strip())

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v: str) -> str:
        return _required(v)

class Room(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)

# Profile Schemas
class ProfileUpdate(BaseModel):
    user_id: str
    display_name: str
    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v: str) -> str:
        return _required(v)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        return _required(v.strip())

class Profile(BaseModel):
    display_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

# Message Schemas
class MessageCreate(BaseModel):
    room_id: int
    user_id: str
    user_name: Optional[str] = Field(default=None, validate_default=True)
    message_text: str
    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("user_id", "message_text")
    @classmethod
    def check_required(cls, v: str) -> str:
        return _required(v)

    @field_validator("user_name")
    @classmethod
    def default_user_name(cls, v: Optional[str]) -> str:
        return "Anonymous" if v is None else v

class Message(BaseModel):
    id: int
    user_id: str
    user_name: str
    message_text: str
    timestamp: datetime.datetime
    model_config = ConfigDict(from_attributes=True)

    @field_serializer("timestamp")
    def serialize_timestamp(self, ts: datetime.datetime) -> str:
        return ts.strftime(TIMESTAMP_FORMAT)

class MessageCreated(BaseModel):
    id: int
