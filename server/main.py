"""FastAPI WebSocket server for the UNO room server."""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from config import config
from game import GameRoom
from handlers import HANDLERS, ConnectionContext
from logging_config import command_context, setup_logging
from middleware.request_id import RequestIDMiddleware
from room import RoomRegistry
from routers.health import router as health_router
from routers.health import set_health_dependencies
from sessions import SessionTable

# Configure logging based on environment
setup_logging(
    level=config.LOG_LEVEL,
    environment=config.ENVIRONMENT,
)
logger = logging.getLogger(__name__)


registry = RoomRegistry()
sessions = SessionTable()

# Pending auto-start timers, keyed by room code
_start_tasks: dict[str, asyncio.Task] = {}


async def auto_start_game(room: GameRoom, delay: Optional[float] = None) -> None:
    """
    Deal the game after a short grace period for more joins.

    The room may have been emptied, or already started, by the time the
    timer fires; both cases are no-ops.
    """
    delay = config.game.auto_start_delay if delay is None else delay
    async with room.lock:
        countdown = room.announce(f"⚡ Game starting in {delay:g} seconds...")
        await sessions.deliver([countdown], room)

    await asyncio.sleep(delay)

    async with room.lock:
        if registry.get_room(room.room_id) is not room:
            return
        events = room.start_game()
        await sessions.deliver(events, room)


def schedule_auto_start(room: GameRoom, delay: Optional[float] = None) -> Optional[asyncio.Task]:
    """Start the auto-start timer for `room` unless one is already pending."""
    pending = _start_tasks.get(room.room_id)
    if pending and not pending.done():
        return pending

    task = asyncio.create_task(auto_start_game(room, delay))
    _start_tasks[room.room_id] = task

    def _forget(done: asyncio.Task) -> None:
        if _start_tasks.get(room.room_id) is done:
            del _start_tasks[room.room_id]
        if done.cancelled():
            return
        exc = done.exception()
        if exc is not None:
            logger.error(f"Auto-start failed for room {room.room_id}", exc_info=exc)

    task.add_done_callback(_forget)
    return task


async def handle_player_leave(room: GameRoom, player_id: str) -> None:
    """Handle a player leaving a room (explicit leave or disconnect)."""
    async with room.lock:
        events = registry.leave(player_id)
        await sessions.deliver(events, room)


async def _shutdown() -> None:
    """Cancel timers and close every open connection."""
    for task in list(_start_tasks.values()):
        task.cancel()
    _start_tasks.clear()

    for session in list(sessions.by_connection.values()):
        try:
            await session.websocket.close(code=1001, reason="Server shutting down")
        except Exception as e:
            logger.debug(f"Closing {session.connection_id} failed: {e}")
    registry.rooms.clear()
    registry.player_rooms.clear()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    set_health_dependencies(room_registry=registry, session_table=sessions)
    for problem in config.validate():
        logger.warning(f"Config: {problem}")
    logger.info(f"UNO server started (environment={config.ENVIRONMENT})")

    yield

    logger.info("Shutdown initiated...")
    await _shutdown()
    logger.info("Shutdown complete")


app = FastAPI(
    title="UNO Room Server",
    debug=config.DEBUG,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestIDMiddleware)
app.include_router(health_router)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()

    session = sessions.open(websocket)
    logger.debug(f"WebSocket connected as {session.connection_id}")

    ctx = ConnectionContext(
        websocket=websocket,
        connection_id=session.connection_id,
        player_id=session.player_id,
    )

    # Shared dependencies passed to every handler
    handler_deps = dict(
        registry=registry,
        sessions=sessions,
        schedule_start=schedule_auto_start,
        handle_player_leave=handle_player_leave,
    )

    try:
        while True:
            data = await websocket.receive_json()
            if not isinstance(data, dict):
                continue
            handler = HANDLERS.get(data.get("type"))
            if handler is None:
                logger.debug(f"Ignoring unknown message type {data.get('type')!r}")
                continue
            room_code = ctx.current_room.room_id if ctx.current_room else None
            with command_context(player_id=ctx.player_id, room_code=room_code):
                await handler(data, ctx, **handler_deps)
    except WebSocketDisconnect:
        logger.debug(f"WebSocket {session.connection_id} disconnected")
    finally:
        room = registry.find_player_room(ctx.player_id)
        if room:
            await handle_player_leave(room, ctx.player_id)
        sessions.close(session.connection_id)


def run():
    """Run the server using uvicorn."""
    import uvicorn

    logger.info(f"Starting UNO server on {config.HOST}:{config.PORT}")
    logger.info(f"Debug mode: {config.DEBUG}")

    uvicorn.run(
        "main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
