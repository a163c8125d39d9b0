"""
Connection sessions and event delivery.

The game core identifies players by a stable player id. This module keeps
the mapping from those ids to live WebSocket connections, and delivers the
OutboundEvent lists the core returns. It is the only place that writes to
sockets.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional

from fastapi import WebSocket

from game import GameRoom
from models.events import Audience, OutboundEvent

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One client connection.

    Attributes:
        connection_id: Transport-level handle, unique per socket.
        player_id: Logical player identity used by the game core.
        websocket: The live connection.
    """

    connection_id: str
    websocket: WebSocket
    player_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])


class SessionTable:
    """Maps connections to player ids and player ids to sockets."""

    def __init__(self) -> None:
        self.by_connection: dict[str, Session] = {}
        self.by_player: dict[str, Session] = {}

    def open(self, websocket: WebSocket, connection_id: Optional[str] = None) -> Session:
        """Register a new connection and assign it a player id."""
        session = Session(connection_id=connection_id or str(uuid.uuid4()), websocket=websocket)
        self.by_connection[session.connection_id] = session
        self.by_player[session.player_id] = session
        return session

    def close(self, connection_id: str) -> Optional[Session]:
        """Forget a connection; returns its session if it was known."""
        session = self.by_connection.pop(connection_id, None)
        if session:
            self.by_player.pop(session.player_id, None)
        return session

    def __len__(self) -> int:
        return len(self.by_connection)

    async def send_to(self, player_id: str, message: dict) -> None:
        """
        Send a message to a specific player.

        Send failures are logged and dropped; a broken socket is cleaned up
        by its own disconnect path.
        """
        session = self.by_player.get(player_id)
        if session is None:
            return
        try:
            await session.websocket.send_json(message)
        except Exception as e:
            logger.debug(f"Send to {player_id} failed: {e}")

    async def deliver(self, events: Iterable[OutboundEvent], room: Optional[GameRoom] = None) -> None:
        """
        Deliver events produced by the core.

        Room-scoped events go to the seats of `room` as they are at the
        time of delivery.
        """
        seat_ids = [seat.id for seat in room.seats] if room else []
        for event in events:
            message = event.to_message()
            if event.audience == Audience.PLAYER:
                if event.player_id:
                    await self.send_to(event.player_id, message)
                continue
            for player_id in seat_ids:
                if event.is_for(player_id):
                    await self.send_to(player_id, message)
