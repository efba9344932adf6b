"""
Room record model.

One Room per game. It holds the roster, the full card state and the escrow
bookkeeping, and is the only thing persisted to the room's storage account.
Hands are stored aligned with ``players`` (hands[i] belongs to players[i]);
``player_hands`` exposes them as a mapping. Every hand is visible to anyone
who can read the record.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from uno.ledger.addresses import Address
from uno.logic.cards import DECK_SIZE, UnoCard
from uno.logic.enums import RoomStatus
from uno.logic.settings import MAX_PLAYERS, MIN_PLAYERS


class Room(BaseModel):
    """Immutable snapshot of a room record."""

    model_config = ConfigDict(frozen=True)

    creator: Address
    slot: int | None = Field(default=None, ge=0, le=255)
    max_players: int = Field(ge=MIN_PLAYERS, le=MAX_PLAYERS)
    entry_fee: int = Field(gt=0)
    players: tuple[Address, ...]
    status: RoomStatus = RoomStatus.WAITING_FOR_PLAYERS
    winner: Address | None = None
    current_player_index: int = Field(default=0, ge=0)
    direction: int = 1  # 1 or -1
    current_card: UnoCard | None = None
    hands: tuple[tuple[UnoCard, ...], ...] = ()
    deck: tuple[UnoCard, ...] = ()
    created_at: int
    game_started_at: int | None = None
    game_ended_at: int | None = None
    prize_claimed: bool = False
    sequence: int = Field(default=0, ge=0)
    external_game_id: str | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> Room:
        if not self.players or self.players[0] != self.creator:
            raise ValueError("creator must be seated first")
        if len(set(self.players)) != len(self.players):
            raise ValueError("players must be unique")
        if len(self.players) > self.max_players:
            raise ValueError(f"{len(self.players)} players exceed max_players={self.max_players}")
        if len(self.hands) != len(self.players):
            raise ValueError("hands must align with players")
        if self.direction not in (1, -1):
            raise ValueError(f"direction must be 1 or -1, got {self.direction}")
        if self.current_player_index >= len(self.players):
            raise ValueError(f"current_player_index {self.current_player_index} out of range")
        if self.winner is not None and self.winner not in self.players:
            raise ValueError("winner must be seated")
        if (self.winner is not None) != (self.status is RoomStatus.COMPLETED):
            raise ValueError("winner is set exactly when the room is completed")
        if self.prize_claimed and self.status is not RoomStatus.COMPLETED:
            raise ValueError("prize can only be claimed on a completed room")
        if self.current_card is not None and self.card_count() != DECK_SIZE:
            raise ValueError(f"card count {self.card_count()} != {DECK_SIZE}")
        return self

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    @property
    def current_player(self) -> str:
        return self.players[self.current_player_index]

    @property
    def player_hands(self) -> dict[str, tuple[UnoCard, ...]]:
        return dict(zip(self.players, self.hands, strict=True))

    def seat_of(self, player: str) -> int | None:
        """Return the roster index for a player, or None if not seated."""
        try:
            return self.players.index(player)
        except ValueError:
            return None

    def card_count(self) -> int:
        """Cards in hands + deck + the visible discard."""
        return sum(len(h) for h in self.hands) + len(self.deck) + (1 if self.current_card is not None else 0)
