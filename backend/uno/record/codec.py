"""
Length-prefixed MessagePack codec for the fixed-capacity room buffer.

Buffer layout: 4-byte little-endian payload length, then the payload, then
zero padding up to the buffer's capacity. The buffer is allocated once at
room creation, while the player list, hands and deck keep changing size,
so every read checks the declared length against the real buffer and
every write checks the payload against the capacity.

A cancelled room leaves a closed marker in place of the record: the
msgpack array `[CLOSED_RECORD_VERSION, last_sequence]`. The sequence
survives so a room created again at the same address continues from it.
"""

import msgpack
from pydantic import ValidationError

from uno.logic.exceptions import CapacityError, CorruptionError
from uno.logic.state import Room
from uno.record.compact import room_from_compact, room_to_compact

LENGTH_PREFIX_BYTES = 4
CLOSED_RECORD_VERSION = 0

# Limits passed to the unpacker; a valid record is far below all of them.
MAX_BIN_LEN = 256
MAX_STR_LEN = 256
MAX_ARRAY_LEN = 32
MAX_MAP_LEN = 0
MAX_EXT_LEN = 0


def declared_length(buffer: bytes | bytearray) -> int:
    """Payload length stated by the prefix; raises CorruptionError if the prefix is missing."""
    if len(buffer) < LENGTH_PREFIX_BYTES:
        raise CorruptionError(f"buffer of {len(buffer)} bytes has no length prefix")
    return int.from_bytes(buffer[:LENGTH_PREFIX_BYTES], byteorder="little")


def is_empty_record(buffer: bytes | bytearray) -> bool:
    """True for a zeroed buffer (never written, or emptied by cancellation)."""
    return declared_length(buffer) == 0


def decode_record(buffer: bytes | bytearray) -> Room:
    """
    Decode a room from a length-prefixed buffer.

    Raises CorruptionError if the prefix is missing, the declared length
    overruns the buffer, or the declared span is not a valid record.
    """
    length = declared_length(buffer)
    if length > len(buffer) - LENGTH_PREFIX_BYTES:
        raise CorruptionError(
            f"declared payload of {length} bytes exceeds buffer of {len(buffer) - LENGTH_PREFIX_BYTES}",
        )
    if length == 0:
        raise CorruptionError("record is empty")
    payload = bytes(buffer[LENGTH_PREFIX_BYTES : LENGTH_PREFIX_BYTES + length])
    try:
        data = msgpack.unpackb(
            payload,
            raw=False,
            max_bin_len=MAX_BIN_LEN,
            max_str_len=MAX_STR_LEN,
            max_array_len=MAX_ARRAY_LEN,
            max_map_len=MAX_MAP_LEN,
            max_ext_len=MAX_EXT_LEN,
        )
        return room_from_compact(data)
    except (msgpack.UnpackException, ValueError, TypeError, KeyError) as e:
        # ValidationError subclasses ValueError
        reason = "record violates room invariants" if isinstance(e, ValidationError) else str(e)
        raise CorruptionError(f"failed to decode room record: {reason}") from e


def encode_record(room: Room, buffer: bytearray) -> None:
    """
    Encode a room into a length-prefixed buffer in place.

    The whole buffer is zeroed first so no byte of an older, longer
    encoding survives past the new payload. Raises CapacityError if the
    payload plus prefix does not fit.
    """
    buffer[:] = bytes(len(buffer))
    payload = msgpack.packb(room_to_compact(room), use_bin_type=True)
    required = len(payload) + LENGTH_PREFIX_BYTES
    if required > len(buffer):
        raise CapacityError(required=required, capacity=len(buffer))
    buffer[:LENGTH_PREFIX_BYTES] = len(payload).to_bytes(LENGTH_PREFIX_BYTES, byteorder="little")
    buffer[LENGTH_PREFIX_BYTES:required] = payload


def encode_closed_record(sequence: int, buffer: bytearray) -> None:
    """Overwrite the buffer with a closed marker carrying the room's last sequence."""
    buffer[:] = bytes(len(buffer))
    payload = msgpack.packb([CLOSED_RECORD_VERSION, sequence])
    required = len(payload) + LENGTH_PREFIX_BYTES
    if required > len(buffer):
        raise CapacityError(required=required, capacity=len(buffer))
    buffer[:LENGTH_PREFIX_BYTES] = len(payload).to_bytes(LENGTH_PREFIX_BYTES, byteorder="little")
    buffer[LENGTH_PREFIX_BYTES:required] = payload


def closed_sequence(buffer: bytes | bytearray) -> int | None:
    """Last sequence stored by a closed marker, or None if the buffer holds anything else."""
    length = declared_length(buffer)
    if length == 0 or length > len(buffer) - LENGTH_PREFIX_BYTES:
        return None
    payload = bytes(buffer[LENGTH_PREFIX_BYTES : LENGTH_PREFIX_BYTES + length])
    try:
        data = msgpack.unpackb(payload, max_array_len=2, max_bin_len=0, max_str_len=0, max_map_len=0, max_ext_len=0)
    except (msgpack.UnpackException, ValueError):
        return None
    if not isinstance(data, list) or len(data) != 2:
        return None
    version, sequence = data
    if type(version) is not int or version != CLOSED_RECORD_VERSION:
        return None
    if type(sequence) is not int or sequence < 0:
        return None
    return sequence
