"""Wire models: inbound commands and outbound events."""

from .commands import (
    CreateRoomCommand,
    JoinRoomCommand,
    PlayCardCommand,
    SendMessageCommand,
)
from .events import Audience, EventType, OutboundEvent

__all__ = [
    "Audience",
    "EventType",
    "OutboundEvent",
    "CreateRoomCommand",
    "JoinRoomCommand",
    "PlayCardCommand",
    "SendMessageCommand",
]
