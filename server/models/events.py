"""
Outbound event definitions for the UNO room server.

The game core never talks to sockets. Every mutating operation returns a
list of OutboundEvent records describing who should receive what; the
transport layer (sessions.SessionTable) delivers them afterwards.

Wire format of a delivered event:

    {"type": "<eventType>", ...data}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    """All event types a client can receive."""

    # Lobby events
    ROOM_CREATED = "roomCreated"
    ROOM_JOINED = "roomJoined"
    PLAYER_JOINED = "playerJoined"
    PLAYER_LEFT = "playerLeft"
    ERROR = "error"

    # Gameplay events
    GAME_STARTED = "gameStarted"
    GAME_UPDATE = "gameUpdate"
    UNO_ALERT = "unoAlert"
    GAME_WON = "gameWon"

    # Chat relay / narration
    CHAT_MESSAGE = "chatMessage"


class Audience(str, Enum):
    """Who an event is addressed to."""

    ROOM = "room"        # every seat in the room
    PLAYER = "player"    # only `player_id`
    OTHERS = "others"    # every seat except `player_id`


@dataclass(frozen=True)
class OutboundEvent:
    """
    A message produced by the game core for delivery.

    Attributes:
        event_type: The type of event (from EventType enum).
        room_id: Room the event belongs to (None for pre-room errors).
        data: Event-specific payload, already JSON-serializable.
        audience: Delivery scope.
        player_id: Recipient (PLAYER) or excluded seat (OTHERS).
    """

    event_type: EventType
    room_id: Optional[str]
    data: dict = field(default_factory=dict)
    audience: Audience = Audience.ROOM
    player_id: Optional[str] = None

    def to_message(self) -> dict:
        """Build the JSON message sent over the WebSocket.

        The event name always wins over any `type` key in the payload.
        """
        return {**self.data, "type": self.event_type.value}

    def is_for(self, player_id: str) -> bool:
        """Whether a seat held by `player_id` should receive this event."""
        if self.audience == Audience.PLAYER:
            return player_id == self.player_id
        if self.audience == Audience.OTHERS:
            return player_id != self.player_id
        return True


# =============================================================================
# Event Factory Functions
# =============================================================================


def room_created(room_id: str, player_id: str, room: dict, player: dict) -> OutboundEvent:
    """Sent to the creator once their room exists."""
    return OutboundEvent(
        event_type=EventType.ROOM_CREATED,
        room_id=room_id,
        data={"room": room, "player": player},
        audience=Audience.PLAYER,
        player_id=player_id,
    )


def room_joined(room_id: str, player_id: str, room: dict, player: dict) -> OutboundEvent:
    """Sent to a player who just took a seat."""
    return OutboundEvent(
        event_type=EventType.ROOM_JOINED,
        room_id=room_id,
        data={"room": room, "player": player},
        audience=Audience.PLAYER,
        player_id=player_id,
    )


def player_joined(room_id: str, player_id: str, player: dict) -> OutboundEvent:
    """Tells the existing occupants about a new seat."""
    return OutboundEvent(
        event_type=EventType.PLAYER_JOINED,
        room_id=room_id,
        data={"player": player},
        audience=Audience.OTHERS,
        player_id=player_id,
    )


def player_left(room_id: str, player: dict) -> OutboundEvent:
    return OutboundEvent(
        event_type=EventType.PLAYER_LEFT,
        room_id=room_id,
        data={"player": player},
    )


def error(message: str, player_id: Optional[str] = None, room_id: Optional[str] = None) -> OutboundEvent:
    """A user-facing failure addressed to a single player."""
    return OutboundEvent(
        event_type=EventType.ERROR,
        room_id=room_id,
        data={"message": message},
        audience=Audience.PLAYER,
        player_id=player_id,
    )


def game_started(room_id: str, message: str) -> OutboundEvent:
    return OutboundEvent(
        event_type=EventType.GAME_STARTED,
        room_id=room_id,
        data={"message": message},
    )


def game_update(room_id: str, player_id: str, view: dict) -> OutboundEvent:
    """Private per-seat snapshot (public view plus the seat's own hand)."""
    return OutboundEvent(
        event_type=EventType.GAME_UPDATE,
        room_id=room_id,
        data=view,
        audience=Audience.PLAYER,
        player_id=player_id,
    )


def uno_alert(room_id: str, player_name: str) -> OutboundEvent:
    return OutboundEvent(
        event_type=EventType.UNO_ALERT,
        room_id=room_id,
        data={"player": player_name, "message": f"🚨 {player_name} has UNO!"},
    )


def game_won(room_id: str, winner_name: str) -> OutboundEvent:
    return OutboundEvent(
        event_type=EventType.GAME_WON,
        room_id=room_id,
        data={"winner": winner_name, "message": f"🎉 {winner_name} wins the game!"},
    )


def chat_message(room_id: str, message: dict) -> OutboundEvent:
    """Relay a chat entry (system narration or player message) to the room."""
    return OutboundEvent(
        event_type=EventType.CHAT_MESSAGE,
        room_id=room_id,
        data=message,
    )
