"""Positional layout of a Room inside the stored record.

The record is a msgpack array rather than a map so that field names cost
nothing. Layout (index: field):

    0  layout version (RECORD_VERSION)
    1  creator                 32-byte bin
    2  slot                    int | nil
    3  max_players             int
    4  entry_fee               int
    5  players                 array of 32-byte bin
    6  status                  WireRoomStatus int
    7  winner                  roster index | nil
    8  current_player_index    int
    9  direction               1 | -1
    10 current_card            card code | nil
    11 hands                   array of bin (one card code per byte), aligned with players
    12 deck                    bin (card codes, last byte is the top)
    13 created_at              int
    14 game_started_at         int | nil
    15 game_ended_at           int | nil
    16 prize_claimed           bool
    17 sequence                int
    18 external_game_id        str | nil
"""

from typing import Any

from uno.ledger.addresses import address_from_bytes, address_to_bytes
from uno.logic.cards import UnoCard, card_from_code, card_to_code
from uno.logic.enums import RoomStatus, WireRoomStatus
from uno.logic.state import Room

RECORD_VERSION = 1
_FIELD_COUNT = 19


def _is_strict_int(value: object) -> bool:
    """Return True if value is an int but not a bool."""
    return isinstance(value, int) and not isinstance(value, bool)


def _pack_cards(cards: tuple[UnoCard, ...]) -> bytes:
    return bytes(card_to_code(card) for card in cards)


def _unpack_cards(raw: object) -> tuple[UnoCard, ...]:
    if not isinstance(raw, bytes):
        raise TypeError(f"card run must be bytes, got {type(raw).__name__}")
    return tuple(card_from_code(code) for code in raw)


def _optional_int(value: object, name: str) -> int | None:
    if value is None:
        return None
    if not _is_strict_int(value):
        raise TypeError(f"{name} must be an integer or nil, got {type(value).__name__}")
    return value


def room_to_compact(room: Room) -> list[Any]:
    """Flatten a room into the positional record layout."""
    return [
        RECORD_VERSION,
        address_to_bytes(room.creator),
        room.slot,
        room.max_players,
        room.entry_fee,
        [address_to_bytes(p) for p in room.players],
        int(WireRoomStatus[room.status.name]),
        room.players.index(room.winner) if room.winner is not None else None,
        room.current_player_index,
        room.direction,
        card_to_code(room.current_card) if room.current_card is not None else None,
        [_pack_cards(hand) for hand in room.hands],
        _pack_cards(room.deck),
        room.created_at,
        room.game_started_at,
        room.game_ended_at,
        room.prize_claimed,
        room.sequence,
        room.external_game_id,
    ]


def room_from_compact(data: object) -> Room:
    """
    Rebuild a room from the positional record layout.

    Raises TypeError or ValueError on any structural mismatch; the codec
    converts these to CorruptionError. Room's own validators enforce the
    record invariants (roster, hands alignment, 108-card total).
    """
    if not isinstance(data, list) or len(data) != _FIELD_COUNT:
        raise ValueError(f"expected {_FIELD_COUNT}-field record array")
    if data[0] != RECORD_VERSION:
        raise ValueError(f"unsupported record version {data[0]!r}")
    (
        _version,
        creator,
        slot,
        max_players,
        entry_fee,
        players,
        status,
        winner_index,
        current_player_index,
        direction,
        current_card,
        hands,
        deck,
        created_at,
        game_started_at,
        game_ended_at,
        prize_claimed,
        sequence,
        external_game_id,
    ) = data

    if not isinstance(creator, bytes):
        raise TypeError("creator must be bytes")
    if not isinstance(players, list) or not all(isinstance(p, bytes) for p in players):
        raise TypeError("players must be an array of bytes")
    if not isinstance(hands, list):
        raise TypeError("hands must be an array")
    player_addresses = tuple(address_from_bytes(p) for p in players)

    winner_index = _optional_int(winner_index, "winner")
    winner = None
    if winner_index is not None:
        if not (0 <= winner_index < len(player_addresses)):
            raise ValueError(f"winner index {winner_index} out of range")
        winner = player_addresses[winner_index]

    card_code = _optional_int(current_card, "current_card")
    if not isinstance(prize_claimed, bool):
        raise TypeError("prize_claimed must be a bool")
    if external_game_id is not None and not isinstance(external_game_id, str):
        raise TypeError("external_game_id must be a string or nil")

    for name, value in (
        ("max_players", max_players),
        ("entry_fee", entry_fee),
        ("status", status),
        ("current_player_index", current_player_index),
        ("direction", direction),
        ("created_at", created_at),
        ("sequence", sequence),
    ):
        if not _is_strict_int(value):
            raise TypeError(f"{name} must be an integer, got {type(value).__name__}")

    return Room(
        creator=address_from_bytes(creator),
        slot=_optional_int(slot, "slot"),
        max_players=max_players,
        entry_fee=entry_fee,
        players=player_addresses,
        status=RoomStatus[WireRoomStatus(status).name],
        winner=winner,
        current_player_index=current_player_index,
        direction=direction,
        current_card=card_from_code(card_code) if card_code is not None else None,
        hands=tuple(_unpack_cards(hand) for hand in hands),
        deck=_unpack_cards(deck),
        created_at=created_at,
        game_started_at=_optional_int(game_started_at, "game_started_at"),
        game_ended_at=_optional_int(game_ended_at, "game_ended_at"),
        prize_claimed=prize_claimed,
        sequence=sequence,
        external_game_id=external_game_id,
    )
