from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from uno.ledger.addresses import address_for_name
from uno.ledger.memory import InMemoryLedger
from uno.logic.cards import UnoCard, build_deck
from uno.logic.enums import CardColor, CardValue, GameVariant, RoomStatus, ShuffleSource
from uno.logic.service import RoomService
from uno.logic.settings import EngineSettings
from uno.logic.state import Room
from uno.tests.helpers.client import FakeClock
from uno.tests.helpers.signing import TEST_OPERATION_SECRET

if TYPE_CHECKING:
    from collections.abc import Sequence

ALICE = address_for_name("alice")
BOB = address_for_name("bob")
CAROL = address_for_name("carol")
DAVE = address_for_name("dave")
PLAYERS = (ALICE, BOB, CAROL, DAVE)

START_TIME = 1_700_000_000
STARTING_BALANCE = 100_000_000


# ============================================================================
# Room Builder Helpers
# ============================================================================


def card(color: str, value: str) -> UnoCard:
    """Shorthand: card("red", "5"), card("black", "Wild4")."""
    return UnoCard(color=CardColor(color), value=CardValue(value))


def remaining_deck(used: Sequence[UnoCard]) -> tuple[UnoCard, ...]:
    """Full deck minus the given cards, so a hand-built room still holds 108 cards."""
    deck = build_deck()
    for used_card in used:
        deck.remove(used_card)
    return tuple(deck)


def create_room_state(
    player_count: int = 2,
    *,
    max_players: int | None = None,
    entry_fee: int = 1_000,
    status: RoomStatus | None = None,
    hands: Sequence[Sequence[UnoCard]] | None = None,
    current_card: UnoCard | None = None,
    deck: Sequence[UnoCard] | None = None,
    current_player_index: int = 0,
    direction: int = 1,
    winner: str | None = None,
    prize_claimed: bool = False,
    slot: int | None = None,
    sequence: int = 0,
) -> Room:
    """
    Build a Room with sensible defaults for testing.

    Passing current_card starts the game: status defaults to IN_PROGRESS and
    the deck defaults to every card not already in a hand or on the discard.
    """
    players = PLAYERS[:player_count]
    hand_tuples = tuple(tuple(h) for h in hands) if hands is not None else tuple(() for _ in players)
    if status is None:
        if winner is not None:
            status = RoomStatus.COMPLETED
        elif current_card is not None:
            status = RoomStatus.IN_PROGRESS
        else:
            status = RoomStatus.WAITING_FOR_PLAYERS
    if deck is None and current_card is not None:
        used = [c for h in hand_tuples for c in h]
        used.append(current_card if not _is_recolored_wild(current_card) else _as_black(current_card))
        deck = remaining_deck(used)
    return Room(
        creator=players[0],
        slot=slot,
        max_players=max_players if max_players is not None else player_count,
        entry_fee=entry_fee,
        players=players,
        status=status,
        winner=winner,
        current_player_index=current_player_index,
        direction=direction,
        current_card=current_card,
        hands=hand_tuples,
        deck=tuple(deck) if deck is not None else (),
        created_at=START_TIME,
        game_started_at=START_TIME if current_card is not None else None,
        prize_claimed=prize_claimed,
        sequence=sequence,
    )


def _is_recolored_wild(c: UnoCard) -> bool:
    return c.value in (CardValue.WILD, CardValue.WILD4) and c.color is not CardColor.BLACK


def _as_black(c: UnoCard) -> UnoCard:
    return UnoCard(color=CardColor.BLACK, value=c.value)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock(START_TIME)


@pytest.fixture
def ledger(clock):
    ledger = InMemoryLedger(clock=clock)
    for player in PLAYERS:
        ledger.fund(player, STARTING_BALANCE)
    return ledger


@pytest.fixture
def settings():
    return EngineSettings(shuffle_source=ShuffleSource.LEDGER_TIME)


@pytest.fixture
def service(ledger, settings):
    return RoomService(ledger, TEST_OPERATION_SECRET, settings)


@pytest.fixture
def hybrid_service(ledger):
    return RoomService(ledger, TEST_OPERATION_SECRET, EngineSettings(variant=GameVariant.HYBRID))
