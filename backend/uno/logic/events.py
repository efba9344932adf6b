"""Domain event models emitted by room operations.

Events describe what an operation changed. They are returned to the caller
inside OperationResult and logged; they are never persisted.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from uno.logic.cards import UnoCard
from uno.logic.enums import CardColor


class EventType(StrEnum):
    """Types of room events."""

    ROOM_CREATED = "room_created"
    PLAYER_JOINED = "player_joined"
    GAME_STARTED = "game_started"
    CARD_PLAYED = "card_played"
    CARD_DRAWN = "card_drawn"
    PENALTY_DRAWN = "penalty_drawn"
    GAME_COMPLETED = "game_completed"
    PRIZE_CLAIMED = "prize_claimed"
    ROOM_CANCELLED = "room_cancelled"
    EXTERNAL_GAME_STARTED = "external_game_started"
    EXTERNAL_GAME_ENDED = "external_game_ended"


class RoomEvent(BaseModel):
    """Base class for all room events."""

    model_config = ConfigDict(frozen=True)

    type: EventType


class RoomCreatedEvent(RoomEvent):
    type: Literal[EventType.ROOM_CREATED] = EventType.ROOM_CREATED
    creator: str
    max_players: int
    entry_fee: int
    slot: int | None = None


class PlayerJoinedEvent(RoomEvent):
    type: Literal[EventType.PLAYER_JOINED] = EventType.PLAYER_JOINED
    player: str
    seat: int


class GameStartedEvent(RoomEvent):
    """Cards dealt and the first discard turned up."""

    type: Literal[EventType.GAME_STARTED] = EventType.GAME_STARTED
    first_card: UnoCard
    deck_size: int


class CardPlayedEvent(RoomEvent):
    type: Literal[EventType.CARD_PLAYED] = EventType.CARD_PLAYED
    player: str
    card: UnoCard
    chosen_color: CardColor | None = None
    next_player_index: int


class CardDrawnEvent(RoomEvent):
    type: Literal[EventType.CARD_DRAWN] = EventType.CARD_DRAWN
    player: str
    next_player_index: int


class PenaltyDrawnEvent(RoomEvent):
    """Cards forced onto the next player by Draw2 or Wild4."""

    type: Literal[EventType.PENALTY_DRAWN] = EventType.PENALTY_DRAWN
    player: str
    count: int


class GameCompletedEvent(RoomEvent):
    type: Literal[EventType.GAME_COMPLETED] = EventType.GAME_COMPLETED
    winner: str


class PrizeClaimedEvent(RoomEvent):
    type: Literal[EventType.PRIZE_CLAIMED] = EventType.PRIZE_CLAIMED
    winner: str
    winner_amount: int
    platform_fee: int


class RoomCancelledEvent(RoomEvent):
    type: Literal[EventType.ROOM_CANCELLED] = EventType.ROOM_CANCELLED
    refunded: tuple[str, ...]
    returned_to_creator: int


class ExternalGameStartedEvent(RoomEvent):
    type: Literal[EventType.EXTERNAL_GAME_STARTED] = EventType.EXTERNAL_GAME_STARTED
    external_game_id: str


class ExternalGameEndedEvent(RoomEvent):
    type: Literal[EventType.EXTERNAL_GAME_ENDED] = EventType.EXTERNAL_GAME_ENDED
    winner: str
