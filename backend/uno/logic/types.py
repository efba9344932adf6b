"""
Pydantic models for operations, results and read-only views.

Operations form a closed tagged union discriminated by ``type``; the room
service dispatches each variant to a dedicated handler.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from uno.ledger.addresses import Address
from uno.logic.cards import UnoCard
from uno.logic.enums import CardColor, OperationType, RoomStatus
from uno.logic.events import RoomEvent


class CreateRoomOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.CREATE_ROOM] = OperationType.CREATE_ROOM
    max_players: int
    entry_fee: int
    slot: int | None = None


class JoinRoomOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.JOIN_ROOM] = OperationType.JOIN_ROOM


class PlayCardOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.PLAY_CARD] = OperationType.PLAY_CARD
    card_index: int
    chosen_color: CardColor | None = None


class DrawCardOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.DRAW_CARD] = OperationType.DRAW_CARD


class StartGameOperation(BaseModel):
    """Hybrid variant: hand play to an external server identified by external_game_id."""

    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.START_GAME] = OperationType.START_GAME
    external_game_id: str


class EndGameOperation(BaseModel):
    """Hybrid variant: report the externally decided winner."""

    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.END_GAME] = OperationType.END_GAME
    winner: Address


class ClaimPrizeOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.CLAIM_PRIZE] = OperationType.CLAIM_PRIZE
    platform_account: Address


class CancelRoomOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[OperationType.CANCEL_ROOM] = OperationType.CANCEL_ROOM


Operation = Annotated[
    CreateRoomOperation
    | JoinRoomOperation
    | PlayCardOperation
    | DrawCardOperation
    | StartGameOperation
    | EndGameOperation
    | ClaimPrizeOperation
    | CancelRoomOperation,
    Field(discriminator="type"),
]


class OperationResult(BaseModel):
    """Outcome of an applied operation."""

    model_config = ConfigDict(frozen=True)

    room: Address
    sequence: int
    events: tuple[RoomEvent, ...] = ()


class RoomView(BaseModel):
    """Room summary as seen from one seat."""

    model_config = ConfigDict(frozen=True)

    status: RoomStatus
    players: tuple[str, ...]
    max_players: int
    entry_fee: int
    prize_pool: int
    current_player_index: int
    direction: int
    current_card: UnoCard | None
    deck_size: int
    hand_counts: tuple[int, ...]
    viewer_seat: int | None
    viewer_hand: tuple[UnoCard, ...] = ()
    winner: str | None = None
    prize_claimed: bool = False
    sequence: int
    external_game_id: str | None = None
