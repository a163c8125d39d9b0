"""WebSocket message handlers for the UNO room server.

Each handler corresponds to a single message type from the client.
Handlers are dispatched via the HANDLERS dict in main.py.

Handlers validate the payload, take the room's lock for the whole command,
call into the game core and hand the returned events to the session table.
In-game rule violations produce no events and therefore no reply.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import WebSocket
from pydantic import ValidationError

from errors import RoomError
from game import GameRoom
from models.commands import (
    CreateRoomCommand,
    JoinRoomCommand,
    PlayCardCommand,
    SendMessageCommand,
)
from models.events import error

logger = logging.getLogger(__name__)


@dataclass
class ConnectionContext:
    """State tracked per WebSocket connection."""

    websocket: WebSocket
    connection_id: str
    player_id: str
    current_room: Optional[GameRoom] = None


def parse(model, data: dict):
    """Validate a client payload, returning None (and logging) if malformed."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Dropping malformed {data.get('type')!r} command: {e.errors()}")
        return None


# ---------------------------------------------------------------------------
# Lobby / Room handlers
# ---------------------------------------------------------------------------

async def handle_create_room(data: dict, ctx: ConnectionContext, *, registry, sessions, **kw) -> None:
    command = parse(CreateRoomCommand, data)
    if command is None:
        return

    try:
        room, events = registry.create_room(ctx.player_id, command.player_name)
    except RoomError as e:
        await sessions.deliver([error(e.message, player_id=ctx.player_id)])
        return

    ctx.current_room = room
    await sessions.deliver(events, room)


async def handle_join_room(data: dict, ctx: ConnectionContext, *, registry, sessions, schedule_start, **kw) -> None:
    command = parse(JoinRoomCommand, data)
    if command is None:
        return

    room = registry.get_room(command.room_id)
    if room is None:
        await sessions.deliver([error("Room not found", player_id=ctx.player_id)])
        return

    async with room.lock:
        try:
            room, _seat, events = registry.join_room(command.room_id, ctx.player_id, command.player_name)
        except RoomError as e:
            await sessions.deliver([error(e.message, player_id=ctx.player_id)])
            return

        ctx.current_room = room
        await sessions.deliver(events, room)

    if room.can_start():
        schedule_start(room)


# ---------------------------------------------------------------------------
# Turn action handlers
# ---------------------------------------------------------------------------

async def handle_play_card(data: dict, ctx: ConnectionContext, *, sessions, **kw) -> None:
    if not ctx.current_room:
        return
    command = parse(PlayCardCommand, data)
    if command is None:
        return

    room = ctx.current_room
    async with room.lock:
        events = room.play_card(ctx.player_id, command.card_id, command.chosen_color)
        await sessions.deliver(events, room)


async def handle_draw_card(data: dict, ctx: ConnectionContext, *, sessions, **kw) -> None:
    if not ctx.current_room:
        return

    room = ctx.current_room
    async with room.lock:
        events = room.draw_card(ctx.player_id)
        await sessions.deliver(events, room)


async def handle_send_message(data: dict, ctx: ConnectionContext, *, sessions, **kw) -> None:
    if not ctx.current_room:
        return
    command = parse(SendMessageCommand, data)
    if command is None:
        return

    room = ctx.current_room
    async with room.lock:
        events = room.add_chat_message(ctx.player_id, command.message)
        await sessions.deliver(events, room)


# ---------------------------------------------------------------------------
# Leave handler
# ---------------------------------------------------------------------------

async def handle_leave_room(data: dict, ctx: ConnectionContext, *, handle_player_leave, **kw) -> None:
    if ctx.current_room:
        await handle_player_leave(ctx.current_room, ctx.player_id)
        ctx.current_room = None


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

HANDLERS = {
    "createRoom": handle_create_room,
    "joinRoom": handle_join_room,
    "playCard": handle_play_card,
    "drawCard": handle_draw_card,
    "sendMessage": handle_send_message,
    "leaveRoom": handle_leave_room,
}
