"""WebSocket message handlers for the Sheepshead server.

Each handler corresponds to a single message type from the client.
Handlers are dispatched via the HANDLERS dict in main.py.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import WebSocket

from game import ActionResult, Hand
from logging_config import get_logger, hand_id_var, room_code_var
from room import Room

logger = get_logger(__name__)


@dataclass
class ConnectionContext:
    """State tracked per WebSocket connection."""

    websocket: WebSocket
    connection_id: str
    player_id: str
    current_room: Optional[Room] = None


async def send_error(ctx: ConnectionContext, message: str, **extra) -> None:
    await ctx.websocket.send_json({"type": "error", "message": message, **extra})


def seated_room(ctx: ConnectionContext) -> Optional[Room]:
    """The connection's room, or None if the player is no longer seated there."""
    room = ctx.current_room
    if room is not None and ctx.player_id not in room.players:
        ctx.current_room = None
        return None
    return room


# ---------------------------------------------------------------------------
# Lobby / Room handlers
# ---------------------------------------------------------------------------

async def handle_create_room(data: dict, ctx: ConnectionContext, *, room_manager, **kw) -> None:
    if seated_room(ctx):
        await send_error(ctx, "Already at a table")
        return

    try:
        room = room_manager.create_room()
    except RuntimeError as e:
        await send_error(ctx, str(e))
        return

    player_name = data.get("player_name") or "Player"
    room.add_player(ctx.player_id, player_name, ctx.websocket)
    ctx.current_room = room
    room_code_var.set(room.code)

    await ctx.websocket.send_json({
        "type": "room_created",
        "room_code": room.code,
        "player_id": ctx.player_id,
    })

    await room.broadcast({
        "type": "player_joined",
        "players": room.player_list(),
    })


async def handle_join_room(data: dict, ctx: ConnectionContext, *, room_manager, **kw) -> None:
    if seated_room(ctx):
        await send_error(ctx, "Already at a table")
        return

    room_code = str(data.get("room_code", "")).upper()
    player_name = data.get("player_name") or "Player"

    room = room_manager.get_room(room_code)
    if not room:
        await send_error(ctx, "Room not found")
        return

    error = room.join_error()
    if error:
        await send_error(ctx, error)
        return

    room.add_player(ctx.player_id, player_name, ctx.websocket)
    ctx.current_room = room
    room_code_var.set(room.code)

    await ctx.websocket.send_json({
        "type": "room_joined",
        "room_code": room.code,
        "player_id": ctx.player_id,
    })

    await room.broadcast({
        "type": "player_joined",
        "players": room.player_list(),
    })


async def handle_list_rooms(data: dict, ctx: ConnectionContext, *, room_manager, **kw) -> None:
    await ctx.websocket.send_json({
        "type": "room_list",
        "rooms": room_manager.public_rooms(),
    })


# ---------------------------------------------------------------------------
# Hand lifecycle handlers
# ---------------------------------------------------------------------------

async def handle_start_hand(data: dict, ctx: ConnectionContext, **kw) -> None:
    room = seated_room(ctx)
    if not room:
        await send_error(ctx, "Not at a table")
        return

    room_player = room.get_player(ctx.player_id)
    if not room_player.is_host:
        await send_error(ctx, "Only the host can deal")
        return

    async with room.game_lock:
        error = room.start_error()
        if error:
            await send_error(ctx, error)
            return

        hand = room.start_hand()
        hand_id_var.set(hand.hand_id)
        logger.with_context(room_code=room.code, hand_id=hand.hand_id).info(
            f"Hand {room.hands_played} dealt, dealer {hand.seat_order[hand.dealer_index]}"
        )

        for pid, player in room.players.items():
            if player.websocket:
                await player.websocket.send_json({
                    "type": "hand_started",
                    "hand_state": hand.get_state(pid),
                })


async def _run_hand_action(
    ctx: ConnectionContext,
    action: Callable[[Hand], ActionResult],
    handle_player_leave,
) -> None:
    """Apply one action to the room's hand and tell the table what happened."""
    room = seated_room(ctx)
    if not room:
        await send_error(ctx, "Not at a table")
        return

    async with room.game_lock:
        if room.hand is None:
            await send_error(ctx, "No hand in progress")
            return
        hand_id_var.set(room.hand.hand_id)

        result = action(room.hand)
        if not result:
            await send_error(ctx, result.error, code=result.code.value, **result.data)
            return

        room.touch()
        await ctx.websocket.send_json({"type": "action_result", **result.data})

        if result.get("trick_complete"):
            await room.broadcast({
                "type": "trick_complete",
                "winner": result.get("winner"),
                "points": result.get("points"),
            })

        if result.get("partner_revealed"):
            await room.broadcast({
                "type": "partner_revealed",
                "partner": result.get("partner_revealed"),
            })

        await room.broadcast_state()

        if result.get("hand_complete"):
            await room.broadcast({
                "type": "hand_complete",
                "results": result.get("results"),
                "summary": room.hand.summary(),
                "players_leaving": room.leaving_names(),
            })
            for player_id in list(room.leaving):
                await room.send_to(player_id, {"type": "left_room", "room_code": room.code})
                await handle_player_leave(room, player_id)


async def handle_pick(data: dict, ctx: ConnectionContext, *, handle_player_leave, **kw) -> None:
    wants_to_pick = data.get("pick", False)
    if not isinstance(wants_to_pick, bool):
        await send_error(ctx, "pick must be true or false")
        return
    await _run_hand_action(
        ctx,
        lambda hand: hand.pick(ctx.player_id, wants_to_pick),
        handle_player_leave,
    )


async def handle_call_partner(data: dict, ctx: ConnectionContext, *, handle_player_leave, **kw) -> None:
    go_alone = data.get("go_alone", False)
    if not isinstance(go_alone, bool):
        await send_error(ctx, "go_alone must be true or false")
        return
    await _run_hand_action(
        ctx,
        lambda hand: hand.call_partner(
            ctx.player_id,
            suit=data.get("suit"),
            go_alone=go_alone,
            under_card_id=data.get("under_card_id"),
        ),
        handle_player_leave,
    )


async def handle_bury(data: dict, ctx: ConnectionContext, *, handle_player_leave, **kw) -> None:
    card_ids = data.get("cards", [])
    await _run_hand_action(
        ctx,
        lambda hand: hand.bury(ctx.player_id, card_ids),
        handle_player_leave,
    )


async def handle_play_card(data: dict, ctx: ConnectionContext, *, handle_player_leave, **kw) -> None:
    card_id = data.get("card_id")
    await _run_hand_action(
        ctx,
        lambda hand: hand.play_card(ctx.player_id, card_id),
        handle_player_leave,
    )


# ---------------------------------------------------------------------------
# Leave handlers
# ---------------------------------------------------------------------------

async def handle_leave_after_hand(data: dict, ctx: ConnectionContext, *, handle_player_leave, **kw) -> None:
    room = seated_room(ctx)
    if not room:
        return

    async with room.game_lock:
        if not room.hand_in_progress():
            await handle_player_leave(room, ctx.player_id)
            ctx.current_room = None
            return

        room.mark_leaving(ctx.player_id)
        await room.broadcast({
            "type": "player_leaving",
            "player_id": ctx.player_id,
            "players_leaving": room.leaving_names(),
            "players": room.player_list(),
        })


async def handle_leave_room(data: dict, ctx: ConnectionContext, *, handle_player_leave, **kw) -> None:
    room = seated_room(ctx)
    if room:
        async with room.game_lock:
            await handle_player_leave(room, ctx.player_id)
        ctx.current_room = None


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

HANDLERS = {
    "create_room": handle_create_room,
    "join_room": handle_join_room,
    "list_rooms": handle_list_rooms,
    "start_hand": handle_start_hand,
    "pick": handle_pick,
    "call_partner": handle_call_partner,
    "bury": handle_bury,
    "play_card": handle_play_card,
    "leave_after_hand": handle_leave_after_hand,
    "leave_room": handle_leave_room,
}
