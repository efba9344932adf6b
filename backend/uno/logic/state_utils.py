"""
Immutable room update utilities using Pydantic model_copy.

These helpers never mutate the input room - they always return a new Room
with the requested change applied.
"""

from uno.logic.cards import UnoCard
from uno.logic.exceptions import DeckExhaustedError
from uno.logic.state import Room


def next_player_index(current_player_index: int, direction: int, player_count: int) -> int:
    """
    Index of the next player in turn order.

    Python's modulo is already non-negative for a positive divisor, so
    stepping backwards from seat 0 lands on the last seat.
    """
    return (current_player_index + direction) % player_count


def advance_turn(room: Room, steps: int = 1) -> Room:
    """Return new room with the turn pointer moved `steps` seats in the current direction."""
    index = room.current_player_index
    for _ in range(steps):
        index = next_player_index(index, room.direction, room.player_count)
    return room.model_copy(update={"current_player_index": index})


def update_hand(room: Room, seat: int, cards: tuple[UnoCard, ...]) -> Room:
    """
    Return new room with the hand at `seat` replaced.

    Raises:
        ValueError: If seat is out of bounds

    """
    if not (0 <= seat < room.player_count):
        raise ValueError(f"Invalid seat {seat}, expected 0-{room.player_count - 1}")
    hands = list(room.hands)
    hands[seat] = cards
    return room.model_copy(update={"hands": tuple(hands)})


def draw_into_hand(room: Room, seat: int, count: int, *, strict: bool = False) -> tuple[Room, int]:
    """
    Move up to `count` cards from the top of the deck (its end) into a hand.

    With strict=True an empty deck raises DeckExhaustedError before anything
    is moved; otherwise the draw stops when the deck runs out.

    Returns:
        (new room, number of cards actually drawn)

    """
    if strict and len(room.deck) < count:
        raise DeckExhaustedError(f"deck has {len(room.deck)} cards, {count} required")
    taken = min(count, len(room.deck))
    if taken == 0:
        return room, 0
    deck = room.deck[: len(room.deck) - taken]
    # pop order: the last card of the deck is drawn first
    drawn = tuple(reversed(room.deck[len(room.deck) - taken :]))
    room = room.model_copy(update={"deck": deck})
    return update_hand(room, seat, (*room.hands[seat], *drawn)), taken
