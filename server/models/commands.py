"""
Inbound command payloads.

Clients send JSON objects of the form {"type": "<command>", ...fields}
with camelCase field names. Each command is validated into one of these
models before a handler touches the game core.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_NAME_LENGTH = 32


class Command(BaseModel):
    """Base for client commands: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CreateRoomCommand(Command):
    player_name: str = "Player"

    @field_validator("player_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()[:MAX_NAME_LENGTH] or "Player"


class JoinRoomCommand(Command):
    room_id: str = Field(max_length=16)
    player_name: str = "Player"

    @field_validator("room_id")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("player_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()[:MAX_NAME_LENGTH] or "Player"


class PlayCardCommand(Command):
    card_id: int
    chosen_color: Optional[str] = None


class SendMessageCommand(Command):
    message: str
