"""
Room lifecycle transitions.

    WAITING_FOR_PLAYERS -> IN_PROGRESS -> COMPLETED
    WAITING_FOR_PLAYERS -> cancelled (record emptied, escrow drained)

The card engine moves a room to IN_PROGRESS as soon as the roster fills.
The hybrid variant instead waits for the creator's StartGame and records
the winner reported by EndGame.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from uno.logic.enums import GameVariant, RoomStatus
from uno.logic.escrow import Refund, plan_refunds
from uno.logic.events import (
    ExternalGameEndedEvent,
    ExternalGameStartedEvent,
    PlayerJoinedEvent,
    RoomCreatedEvent,
    RoomEvent,
)
from uno.logic.exceptions import AddressDerivationError, ArgumentError, AuthorizationError, StateError
from uno.logic.settings import MAX_AMOUNT, MAX_PLAYERS, MIN_PLAYERS
from uno.logic.state import Room
from uno.logic.turn import deal_game

if TYPE_CHECKING:
    from uno.logic.settings import EngineSettings

logger = structlog.get_logger()


def validate_room_parameters(max_players: int, entry_fee: int, slot: int | None, settings: EngineSettings) -> None:
    if not (MIN_PLAYERS <= max_players <= MAX_PLAYERS):
        raise ArgumentError(f"max_players must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {max_players}")
    if not (0 < entry_fee <= MAX_AMOUNT):
        raise ArgumentError(f"entry_fee must be in (0, {MAX_AMOUNT}], got {entry_fee}")
    if slot is not None and not (0 <= slot < settings.max_room_slots):
        raise ArgumentError(f"slot must be in [0, {settings.max_room_slots}), got {slot}")


def check_room_address(supplied: str, derived: str) -> None:
    if supplied != derived:
        raise AddressDerivationError(f"room address {supplied} does not match derived address {derived}")


def create_room(
    creator: str,
    max_players: int,
    entry_fee: int,
    *,
    slot: int | None,
    now: int,
    settings: EngineSettings,
) -> tuple[Room, list[RoomEvent]]:
    """New room seating only its creator."""
    validate_room_parameters(max_players, entry_fee, slot, settings)
    room = Room(
        creator=creator,
        slot=slot,
        max_players=max_players,
        entry_fee=entry_fee,
        players=(creator,),
        hands=((),),
        created_at=now,
    )
    return room, [RoomCreatedEvent(creator=creator, max_players=max_players, entry_fee=entry_fee, slot=slot)]


def join_room(
    room: Room,
    player: str,
    *,
    seed: int,
    now: int,
    settings: EngineSettings,
) -> tuple[Room, list[RoomEvent]]:
    """
    Seat a new player.

    Under the on-engine variant a full roster is dealt immediately.
    """
    if room.status is not RoomStatus.WAITING_FOR_PLAYERS:
        raise StateError(f"room is {room.status.value}, not accepting players")
    if room.seat_of(player) is not None:
        raise ArgumentError("player already seated")
    if room.is_full:
        raise ArgumentError(f"room is full ({room.max_players} players)")

    room = room.model_copy(update={"players": (*room.players, player), "hands": (*room.hands, ())})
    events: list[RoomEvent] = [PlayerJoinedEvent(player=player, seat=room.player_count - 1)]

    if room.is_full and settings.variant is GameVariant.ON_ENGINE:
        room, dealt = deal_game(room, seed=seed, now=now, shuffle_source=settings.shuffle_source)
        events.extend(dealt)
    return room, events


def cancel_room(room: Room, caller: str) -> list[Refund]:
    """Validate a cancellation and return the refunds owed to non-creator players."""
    if caller != room.creator:
        raise AuthorizationError("only the creator may cancel the room")
    if room.status is not RoomStatus.WAITING_FOR_PLAYERS:
        raise StateError(f"room is {room.status.value}, cannot cancel")
    return plan_refunds(room)


def start_external_game(
    room: Room,
    caller: str,
    external_game_id: str,
    *,
    now: int,
    settings: EngineSettings,
) -> tuple[Room, list[RoomEvent]]:
    """Lock the roster and hand play over to an external game server."""
    if caller != room.creator:
        raise AuthorizationError("only the creator may start the game")
    if room.status is not RoomStatus.WAITING_FOR_PLAYERS:
        raise StateError(f"room is {room.status.value}, cannot start")
    if room.player_count < MIN_PLAYERS:
        raise StateError(f"need at least {MIN_PLAYERS} players, have {room.player_count}")
    external_game_id = external_game_id.strip()
    # measured in UTF-8 bytes, the unit the record decoder limits
    if not external_game_id or len(external_game_id.encode("utf-8")) > settings.max_external_game_id_length:
        raise ArgumentError(
            f"external game id must be 1-{settings.max_external_game_id_length} bytes of UTF-8",
        )

    room = room.model_copy(
        update={
            "status": RoomStatus.IN_PROGRESS,
            "game_started_at": now,
            "external_game_id": external_game_id,
        },
    )
    logger.info("external game started", external_game_id=external_game_id, players=room.player_count)
    return room, [ExternalGameStartedEvent(external_game_id=external_game_id)]


def end_external_game(room: Room, caller: str, winner: str, *, now: int) -> tuple[Room, list[RoomEvent]]:
    """Record the winner reported for an externally played game."""
    if caller != room.creator:
        raise AuthorizationError("only the creator may report the result")
    if room.status is not RoomStatus.IN_PROGRESS:
        raise StateError(f"room is {room.status.value}, cannot end")
    if room.seat_of(winner) is None:
        raise ArgumentError("winner is not seated in this room")

    room = room.model_copy(update={"status": RoomStatus.COMPLETED, "winner": winner, "game_ended_at": now})
    return room, [ExternalGameEndedEvent(winner=winner)]
