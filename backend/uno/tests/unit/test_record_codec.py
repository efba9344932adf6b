import msgpack
import pytest

from uno.logic.cards import card_to_code
from uno.logic.enums import RoomStatus
from uno.logic.exceptions import CapacityError, CorruptionError
from uno.logic.settings import MAX_AMOUNT, RECORD_CAPACITY
from uno.record.codec import (
    LENGTH_PREFIX_BYTES,
    closed_sequence,
    decode_record,
    declared_length,
    encode_closed_record,
    encode_record,
    is_empty_record,
)
from uno.record.compact import room_to_compact
from uno.tests.conftest import ALICE, BOB, CAROL, card, create_room_state


def _encoded(room, capacity=RECORD_CAPACITY) -> bytearray:
    buffer = bytearray(capacity)
    encode_record(room, buffer)
    return buffer


def _buffer_with_payload(payload: bytes, capacity=RECORD_CAPACITY) -> bytearray:
    buffer = bytearray(capacity)
    buffer[:LENGTH_PREFIX_BYTES] = len(payload).to_bytes(LENGTH_PREFIX_BYTES, "little")
    buffer[LENGTH_PREFIX_BYTES : LENGTH_PREFIX_BYTES + len(payload)] = payload
    return buffer


def _mid_game_room():
    hands = [
        [card("red", "1"), card("blue", "Skip"), card("black", "Wild4")],
        [card("green", "0")],
        [card("yellow", "9"), card("yellow", "9")],
        [card("black", "Wild"), card("red", "Draw2")],
    ]
    return create_room_state(
        4,
        entry_fee=MAX_AMOUNT,
        hands=hands,
        current_card=card("green", "Wild"),
        current_player_index=2,
        direction=-1,
        slot=7,
        sequence=41,
    )


class TestEncodeDecode:
    def test_waiting_room(self) -> None:
        room = create_room_state(1, max_players=4)
        assert decode_record(_encoded(room)) == room

    def test_mid_game_room(self) -> None:
        room = _mid_game_room()
        decoded = decode_record(_encoded(room))
        assert decoded == room
        assert decoded.current_card == card("green", "Wild")

    def test_completed_hybrid_room(self) -> None:
        room = create_room_state(3, max_players=4, winner=CAROL, prize_claimed=True)
        room = room.model_copy(update={"external_game_id": "match-2024-07"})
        decoded = decode_record(_encoded(room))
        assert decoded.winner == CAROL
        assert decoded.external_game_id == "match-2024-07"
        assert decoded.status is RoomStatus.COMPLETED

    def test_full_four_player_deal_fits_capacity(self) -> None:
        room = _mid_game_room()
        buffer = _encoded(room)
        assert declared_length(buffer) + LENGTH_PREFIX_BYTES <= RECORD_CAPACITY

    def test_length_prefix_is_little_endian(self) -> None:
        room = create_room_state(1, max_players=2)
        buffer = _encoded(room)
        payload = msgpack.packb(room_to_compact(room), use_bin_type=True)
        assert buffer[:4] == len(payload).to_bytes(4, "little")
        assert bytes(buffer[4 : 4 + len(payload)]) == payload

    def test_shorter_encoding_zeroes_stale_bytes(self) -> None:
        buffer = _encoded(_mid_game_room())
        small = create_room_state(1, max_players=2)
        encode_record(small, buffer)
        end = LENGTH_PREFIX_BYTES + declared_length(buffer)
        assert all(b == 0 for b in buffer[end:])

    def test_cards_pack_one_byte_each(self) -> None:
        room = _mid_game_room()
        compact = room_to_compact(room)
        assert compact[12] == bytes(card_to_code(c) for c in room.deck)
        assert compact[7] is None

    def test_capacity_exceeded(self) -> None:
        buffer = bytearray(64)
        with pytest.raises(CapacityError) as exc_info:
            encode_record(_mid_game_room(), buffer)
        assert exc_info.value.capacity == 64
        assert exc_info.value.required > 64


class TestCorruptRecords:
    def test_buffer_shorter_than_prefix(self) -> None:
        with pytest.raises(CorruptionError, match="no length prefix"):
            decode_record(b"\x01\x00")

    def test_declared_length_overruns_buffer(self) -> None:
        buffer = _encoded(create_room_state(1, max_players=2))
        buffer[:4] = (RECORD_CAPACITY - 3).to_bytes(4, "little")
        with pytest.raises(CorruptionError, match="exceeds buffer"):
            decode_record(buffer)

    def test_huge_declared_length(self) -> None:
        buffer = bytearray(b"\xff\xff\xff\xff") + bytearray(8)
        with pytest.raises(CorruptionError):
            decode_record(buffer)

    def test_empty_record(self) -> None:
        buffer = bytearray(RECORD_CAPACITY)
        assert is_empty_record(buffer)
        with pytest.raises(CorruptionError, match="empty"):
            decode_record(buffer)

    def test_garbage_payload(self) -> None:
        with pytest.raises(CorruptionError):
            decode_record(_buffer_with_payload(b"\xc1\xc1\xc1"))

    def test_truncated_payload(self) -> None:
        payload = msgpack.packb(room_to_compact(_mid_game_room()), use_bin_type=True)
        with pytest.raises(CorruptionError):
            decode_record(_buffer_with_payload(payload[:-10]))

    def test_wrong_shape(self) -> None:
        with pytest.raises(CorruptionError, match="19-field"):
            decode_record(_buffer_with_payload(msgpack.packb([1, 2, 3])))

    def test_map_payload_rejected(self) -> None:
        with pytest.raises(CorruptionError):
            decode_record(_buffer_with_payload(msgpack.packb({"creator": ALICE})))

    def test_unknown_version(self) -> None:
        compact = room_to_compact(create_room_state(1, max_players=2))
        compact[0] = 99
        with pytest.raises(CorruptionError, match="version"):
            decode_record(_buffer_with_payload(msgpack.packb(compact, use_bin_type=True)))

    def test_invalid_card_code(self) -> None:
        compact = room_to_compact(_mid_game_room())
        compact[12] = compact[12][:-1] + bytes([0x4F])
        with pytest.raises(CorruptionError, match="invalid card code"):
            decode_record(_buffer_with_payload(msgpack.packb(compact, use_bin_type=True)))

    def test_card_total_mismatch(self) -> None:
        compact = room_to_compact(_mid_game_room())
        compact[12] = compact[12][:-1]
        with pytest.raises(CorruptionError, match="invariants"):
            decode_record(_buffer_with_payload(msgpack.packb(compact, use_bin_type=True)))

    def test_winner_index_out_of_range(self) -> None:
        compact = room_to_compact(create_room_state(2, winner=BOB))
        compact[7] = 5
        with pytest.raises(CorruptionError, match="winner index"):
            decode_record(_buffer_with_payload(msgpack.packb(compact, use_bin_type=True)))

    def test_bool_where_int_expected(self) -> None:
        compact = room_to_compact(create_room_state(2))
        compact[3] = True
        with pytest.raises(CorruptionError, match="max_players"):
            decode_record(_buffer_with_payload(msgpack.packb(compact, use_bin_type=True)))

    def test_bad_status(self) -> None:
        compact = room_to_compact(create_room_state(2))
        compact[6] = 7
        with pytest.raises(CorruptionError):
            decode_record(_buffer_with_payload(msgpack.packb(compact, use_bin_type=True)))

    def test_short_address(self) -> None:
        compact = room_to_compact(create_room_state(2))
        compact[1] = b"\x00" * 31
        with pytest.raises(CorruptionError):
            decode_record(_buffer_with_payload(msgpack.packb(compact, use_bin_type=True)))


class TestClosedRecord:
    def test_keeps_last_sequence(self) -> None:
        buffer = bytearray(b"\xff" * RECORD_CAPACITY)
        encode_closed_record(7, buffer)
        assert closed_sequence(buffer) == 7
        assert not is_empty_record(buffer)
        assert not any(buffer[LENGTH_PREFIX_BYTES + declared_length(buffer) :])

    def test_is_not_a_room(self) -> None:
        buffer = bytearray(RECORD_CAPACITY)
        encode_closed_record(3, buffer)
        with pytest.raises(CorruptionError):
            decode_record(buffer)

    def test_live_room_has_no_closed_sequence(self) -> None:
        assert closed_sequence(_encoded(create_room_state(2, sequence=4))) is None

    @pytest.mark.parametrize(
        "payload",
        [msgpack.packb([1, 5]), msgpack.packb([0, -1]), msgpack.packb([0, True]), msgpack.packb([0, 1, 2]), b"\xc1"],
    )
    def test_other_payloads(self, payload) -> None:
        assert closed_sequence(_buffer_with_payload(payload)) is None

    def test_empty_buffer(self) -> None:
        assert closed_sequence(bytearray(RECORD_CAPACITY)) is None
