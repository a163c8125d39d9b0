"""
Lobby errors surfaced to clients.

These are the only user-facing failures. In-game rule violations (wrong
turn, card not in hand, illegal play) are silent no-ops and never raise.
"""


class RoomError(Exception):
    """Base class for room membership failures."""

    message = "Room error"

    def __init__(self, room_id: str = "", message: str = ""):
        self.room_id = room_id
        if message:
            self.message = message
        super().__init__(f"{self.message} ({room_id})" if room_id else self.message)


class RoomNotFound(RoomError):
    message = "Room not found"


class RoomFull(RoomError):
    message = "Room is full"


class AlreadyInRoom(RoomError):
    message = "Already in a room"
