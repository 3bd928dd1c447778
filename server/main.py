"""FastAPI WebSocket server for Sheepshead."""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from config import config
from handlers import HANDLERS, ConnectionContext
from logging_config import player_id_var, setup_logging
from room import Room, RoomManager
from routers.health import router as health_router
from routers.health import set_health_dependencies

logger = logging.getLogger(__name__)

room_manager = RoomManager()

ROOM_SWEEP_INTERVAL_SECONDS = 60


async def close_idle_rooms() -> list[str]:
    """Close every table that has been idle past the room timeout."""
    closed = []
    for room in room_manager.idle_rooms():
        async with room.game_lock:
            await room.broadcast({"type": "room_closed", "reason": "idle"})
            for player_id in list(room.players):
                room.remove_player(player_id)
            room_manager.remove_room(room.code)
        closed.append(room.code)
    return closed


async def _periodic_room_sweep():
    """Periodic task closing idle rooms."""
    while True:
        try:
            await asyncio.sleep(ROOM_SWEEP_INTERVAL_SECONDS)
            closed = await close_idle_rooms()
            if closed:
                logger.info(f"Closed idle rooms: {', '.join(closed)}")
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"Room sweep failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and wire the room registry into the health checks."""
    setup_logging(level=config.LOG_LEVEL, environment=config.ENVIRONMENT)
    set_health_dependencies(room_manager=room_manager)
    sweep_task = asyncio.create_task(_periodic_room_sweep())
    logger.info(f"Sheepshead server started (environment={config.ENVIRONMENT})")

    yield

    logger.info("Shutdown initiated...")
    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        pass
    await _close_all_websockets()
    logger.info("Shutdown complete")


async def _close_all_websockets():
    """Close all active WebSocket connections gracefully."""
    for room in list(room_manager.rooms.values()):
        for player in room.players.values():
            if player.websocket:
                try:
                    await player.websocket.close(code=1001, reason="Server shutting down")
                except Exception as e:
                    logger.debug(f"Close failed for {player.id}: {e}")


app = FastAPI(
    title="Sheepshead",
    description="5-handed Wisconsin Sheepshead server",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(health_router)


class PublicRoom(BaseModel):
    code: str
    player_count: int
    open_seats: int
    players: list[str]


class RoomListResponse(BaseModel):
    rooms: list[PublicRoom]


@app.get("/api/rooms", response_model=RoomListResponse)
async def list_rooms():
    """Tables with open seats that are not in the middle of a hand."""
    return {"rooms": room_manager.public_rooms()}


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()

    connection_id = str(uuid.uuid4())
    player_id_var.set(connection_id)
    logger.debug(f"WebSocket connected as {connection_id}")

    ctx = ConnectionContext(
        websocket=websocket,
        connection_id=connection_id,
        player_id=connection_id,
    )

    # Shared dependencies passed to every handler
    handler_deps = dict(
        room_manager=room_manager,
        handle_player_leave=handle_player_leave,
    )

    try:
        while True:
            try:
                data = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"type": "error", "message": "Malformed message"})
                continue
            if not isinstance(data, dict):
                await websocket.send_json({"type": "error", "message": "Malformed message"})
                continue

            handler = HANDLERS.get(data.get("type"))
            if handler:
                await handler(data, ctx, **handler_deps)
            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {data.get('type')}",
                })
    except WebSocketDisconnect:
        room = room_manager.find_player_room(ctx.player_id)
        if room:
            async with room.game_lock:
                await handle_player_leave(room, ctx.player_id)


async def handle_player_leave(room: Room, player_id: str):
    """Remove a player from their table; close the table when it empties."""
    had_hand = room.hand_in_progress()
    room_player = room.remove_player(player_id)

    if room.is_empty():
        room_manager.remove_room(room.code)
    elif room_player:
        await room.broadcast({
            "type": "player_left",
            "player_id": player_id,
            "player_name": room_player.name,
            "players": room.player_list(),
            "hand_abandoned": had_hand,
        })


def run():
    """Run the server using uvicorn."""
    import uvicorn

    logger.info(f"Starting Sheepshead server on {config.HOST}:{config.PORT}")
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
