"""
Room registry for multiplayer UNO.

The registry is the directory of live rooms:
    - room code -> GameRoom
    - player id -> room code (a player sits in at most one room)

It owns room creation and destruction and player ingress/egress. One
registry is created at process start and passed explicitly to every
handler; nothing in the game core looks it up globally.

All mapping changes happen under a single re-entrant lock so that a join
can never attach a player to a room that is being destroyed concurrently.
"""

import logging
import random
import string
import threading
from typing import Optional

from constants import ROOM_CODE_LENGTH
from errors import AlreadyInRoom, RoomNotFound
from game import GamePhase, GameRoom, Seat
from models.events import OutboundEvent, player_joined, room_created, room_joined

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


class RoomRegistry:
    """
    Manages all active game rooms.

    Provides room creation with unique codes, lookup, membership tracking
    and cleanup of empty rooms.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self.rooms: dict[str, GameRoom] = {}
        self.player_rooms: dict[str, str] = {}
        self._lock = threading.RLock()

    def _generate_code(self, max_attempts: int = 100) -> str:
        """Generate a unique room code among the live rooms."""
        for _ in range(max_attempts):
            code = "".join(random.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
            if code not in self.rooms:
                return code
        raise RuntimeError("Could not generate unique room code")

    def create_room(self, player_id: str, player_name: str) -> tuple[GameRoom, list[OutboundEvent]]:
        """
        Create a room in WAITING with the creator in seat 0.

        Args:
            player_id: Creator's player id.
            player_name: Creator's display name.

        Returns:
            The new room and the events to deliver (roomCreated + welcome).

        Raises:
            AlreadyInRoom: If the player already sits in a room.
        """
        with self._lock:
            if player_id in self.player_rooms:
                raise AlreadyInRoom(self.player_rooms[player_id])

            room = GameRoom(room_id=self._generate_code())
            seat = room.add_seat(player_id, player_name)
            self.rooms[room.room_id] = room
            self.player_rooms[player_id] = room.room_id

        logger.info(f"Room {room.room_id} created by {player_name}")
        events = [
            room.announce(f"🎮 Welcome to the game, {player_name}!"),
            room_created(room.room_id, player_id, room.public_view(), seat.to_public_dict()),
        ]
        return room, events

    def join_room(self, room_id: str, player_id: str, player_name: str) -> tuple[GameRoom, Seat, list[OutboundEvent]]:
        """
        Seat a player in an existing room.

        A player joining a game in progress is dealt a full hand from the
        draw pile.

        Args:
            room_id: Room code (case-insensitive).
            player_id: Joining player's id.
            player_name: Joining player's display name.

        Returns:
            The room, the new seat, and the events to deliver.

        Raises:
            RoomNotFound: No live room has this code.
            RoomFull: The room already has the maximum number of seats.
            AlreadyInRoom: The player already sits in a room.
        """
        code = (room_id or "").strip().upper()
        with self._lock:
            room = self.rooms.get(code)
            if room is None:
                raise RoomNotFound(code)
            if player_id in self.player_rooms:
                raise AlreadyInRoom(self.player_rooms[player_id])

            seat = room.add_seat(player_id, player_name)
            self.player_rooms[player_id] = code

        logger.info(f"{player_name} joined room {code} ({len(room.seats)} seats)")
        events = [
            room.announce(f"🚪 {player_name} joined the game!"),
            room_joined(code, player_id, room.public_view(), seat.to_public_dict()),
            player_joined(code, player_id, seat.to_public_dict()),
        ]
        events.extend(room.deal_in(seat))
        return room, seat, events

    def leave(self, player_id: str) -> list[OutboundEvent]:
        """
        Remove a player from whichever room they are in.

        The room is destroyed as soon as its last seat leaves.

        Returns:
            Events for the remaining occupants (empty if none remain).
        """
        with self._lock:
            code = self.player_rooms.pop(player_id, None)
            room = self.rooms.get(code) if code else None
            if room is None:
                return []

            events = room.remove_player(player_id)
            if room.is_empty():
                self.remove_room(code)
        return events

    def get_room(self, code: str) -> Optional[GameRoom]:
        """
        Get a room by its code (case-insensitive).

        Returns:
            The GameRoom if found, None otherwise.
        """
        return self.rooms.get((code or "").upper())

    def remove_room(self, code: str) -> None:
        """Delete a room and forget any players still mapped to it."""
        with self._lock:
            room = self.rooms.pop(code, None)
            if room is None:
                return
            for pid in [pid for pid, rid in self.player_rooms.items() if rid == code]:
                del self.player_rooms[pid]
        logger.info(f"Room {code} destroyed")

    def find_player_room(self, player_id: str) -> Optional[GameRoom]:
        """Find which room a player is in, or None."""
        with self._lock:
            code = self.player_rooms.get(player_id)
            return self.rooms.get(code) if code else None

    def stats(self) -> dict:
        """Counts for the metrics endpoint."""
        with self._lock:
            rooms = list(self.rooms.values())
        return {
            "active_rooms": len(rooms),
            "total_players": sum(len(r.seats) for r in rooms),
            "games_in_progress": sum(1 for r in rooms if r.phase == GamePhase.PLAYING),
        }
