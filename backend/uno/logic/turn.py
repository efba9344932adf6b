"""
Turn resolution for the card game.

Dealing, card plays with their special effects, draws and win detection.
Every function takes a Room snapshot and returns a new one together with
the events describing the change; validation always happens before the
first update so a rejected move leaves nothing behind.
"""

from __future__ import annotations

import structlog

from uno.logic.cards import HAND_SIZE, UnoCard, build_deck, is_valid_move
from uno.logic.enums import PLAYABLE_COLORS, CardColor, CardValue, RoomStatus, ShuffleSource
from uno.logic.events import (
    CardDrawnEvent,
    CardPlayedEvent,
    GameCompletedEvent,
    GameStartedEvent,
    PenaltyDrawnEvent,
    RoomEvent,
)
from uno.logic.exceptions import ArgumentError, DeckExhaustedError, StateError
from uno.logic.rng import Lcg64, fisher_yates_shuffle, pick_initial_color
from uno.logic.state import Room
from uno.logic.state_utils import advance_turn, draw_into_hand, next_player_index, update_hand

logger = structlog.get_logger()

DRAW2_PENALTY = 2
WILD4_PENALTY = 4


def deal_game(room: Room, *, seed: int, now: int, shuffle_source: ShuffleSource) -> tuple[Room, list[RoomEvent]]:
    """
    Shuffle a fresh deck, deal HAND_SIZE cards to every seat and turn up the first discard.

    Each seat takes its cards by popping the deck's end, seats in roster
    order. A black first discard is given a color (see pick_initial_color).
    """
    rng = Lcg64(seed)
    deck = fisher_yates_shuffle(build_deck(), rng)

    hands: list[tuple[UnoCard, ...]] = []
    for _ in room.players:
        hands.append(tuple(deck.pop() for _ in range(HAND_SIZE)))

    first = deck.pop()
    if first.is_wild:
        first = UnoCard(color=pick_initial_color(shuffle_source, rng, len(deck)), value=first.value)

    new_room = room.model_copy(
        update={
            "status": RoomStatus.IN_PROGRESS,
            "game_started_at": now,
            "deck": tuple(deck),
            "hands": tuple(hands),
            "current_card": first,
            "current_player_index": 0,
            "direction": 1,
        },
    )
    logger.info("game dealt", players=room.player_count, first_card=str(first), deck_size=len(deck))
    return new_room, [GameStartedEvent(first_card=first, deck_size=len(deck))]


def _require_turn(room: Room, player: str) -> int:
    if room.status is not RoomStatus.IN_PROGRESS:
        raise StateError(f"room is {room.status.value}, not in progress")
    seat = room.seat_of(player)
    if seat is None:
        raise StateError("player is not seated in this room")
    if seat != room.current_player_index:
        raise StateError(f"not your turn: seat {seat}, current seat {room.current_player_index}")
    return seat


def play_card(
    room: Room,
    player: str,
    card_index: int,
    chosen_color: CardColor | None,
    *,
    now: int,
) -> tuple[Room, list[RoomEvent]]:
    """
    Play the card at `card_index` from the acting player's hand.

    Effects:
    - black card: becomes `chosen_color` (required); Wild4 makes the next player draw 4
    - Skip: turn pointer moves two seats
    - Reverse: direction flips; with two players the acting player goes again,
      otherwise the turn passes one seat in the new direction
    - Draw2: next player draws 2
    Penalty draws stop early if the deck runs out. Emptying the hand
    completes the game; the winner is recorded and no turn is advanced.
    """
    seat = _require_turn(room, player)
    hand = room.hands[seat]
    if not (0 <= card_index < len(hand)):
        raise ArgumentError(f"card index {card_index} out of range for hand of {len(hand)}")
    if room.current_card is None:
        raise StateError("no card in play")
    card = hand[card_index]
    if not is_valid_move(card, room.current_card):
        raise ArgumentError(f"{card} cannot be played on {room.current_card}")
    if card.is_wild and chosen_color not in PLAYABLE_COLORS:
        raise ArgumentError(f"{card.value.value} requires a chosen color, got {chosen_color}")

    events: list[RoomEvent] = []
    room = update_hand(room, seat, hand[:card_index] + hand[card_index + 1 :])
    turn_moved = False

    if card.is_wild:
        room = room.model_copy(update={"current_card": UnoCard(color=chosen_color, value=card.value)})
        if card.value is CardValue.WILD4:
            room = _penalize_next(room, WILD4_PENALTY, events)
    else:
        room = room.model_copy(update={"current_card": card})
        if card.value is CardValue.SKIP:
            room = advance_turn(room, steps=2)
            turn_moved = True
        elif card.value is CardValue.REVERSE:
            room = room.model_copy(update={"direction": -room.direction})
            if room.player_count > 2:
                room = advance_turn(room)
            turn_moved = True
        elif card.value is CardValue.DRAW2:
            room = _penalize_next(room, DRAW2_PENALTY, events)

    played_color = chosen_color if card.is_wild else None
    if not room.hands[seat]:
        room = room.model_copy(
            update={
                "status": RoomStatus.COMPLETED,
                "winner": player,
                "game_ended_at": now,
                "current_player_index": seat,
            },
        )
        events.insert(
            0,
            CardPlayedEvent(player=player, card=card, chosen_color=played_color, next_player_index=seat),
        )
        events.append(GameCompletedEvent(winner=player))
        logger.info("game completed", winner=player)
        return room, events

    if not turn_moved:
        room = advance_turn(room)
    events.insert(
        0,
        CardPlayedEvent(
            player=player,
            card=card,
            chosen_color=played_color,
            next_player_index=room.current_player_index,
        ),
    )
    return room, events


def _penalize_next(room: Room, count: int, events: list[RoomEvent]) -> Room:
    victim_seat = next_player_index(room.current_player_index, room.direction, room.player_count)
    room, drawn = draw_into_hand(room, victim_seat, count)
    if drawn < count:
        logger.warning("deck ran out during penalty draw", wanted=count, drawn=drawn)
    events.append(PenaltyDrawnEvent(player=room.players[victim_seat], count=drawn))
    return room


def draw_card(room: Room, player: str) -> tuple[Room, list[RoomEvent]]:
    """
    Draw one card for the acting player and pass the turn.

    Raises DeckExhaustedError when the deck is empty; discards are never
    reshuffled back into the deck.
    """
    seat = _require_turn(room, player)
    if not room.deck:
        raise DeckExhaustedError("deck is exhausted")
    room, _ = draw_into_hand(room, seat, 1, strict=True)
    room = advance_turn(room)
    return room, [CardDrawnEvent(player=player, next_player_index=room.current_player_index)]
