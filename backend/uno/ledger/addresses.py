"""
Account identities and deterministic sub-account addresses.

An Address is 32 bytes rendered as 64 lowercase hex characters. Room
addresses are never chosen freely: they are derived from seeds
``("uno_game", creator[, slot])`` so anyone can recompute and verify them.
"""

import hashlib
from collections.abc import Sequence
from typing import Annotated

from pydantic import StringConstraints

ADDRESS_BYTES = 32
ROOM_SEED_TAG = b"uno_game"
MAX_ROOM_SLOTS = 10

_DERIVATION_MARKER = b"ProgramDerivedAddress"

Address = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{64}$")]


def address_to_bytes(address: str) -> bytes:
    """Convert a hex address to its 32 raw bytes."""
    raw = bytes.fromhex(address)
    if len(raw) != ADDRESS_BYTES:
        raise ValueError(f"address must be {ADDRESS_BYTES} bytes, got {len(raw)}")
    return raw


def address_from_bytes(raw: bytes) -> str:
    """Render 32 raw bytes as a hex address."""
    if len(raw) != ADDRESS_BYTES:
        raise ValueError(f"address must be {ADDRESS_BYTES} bytes, got {len(raw)}")
    return raw.hex()


def address_for_name(name: str) -> str:
    """Stable address for a human-readable label (local runs and tests)."""
    return hashlib.sha256(name.encode()).hexdigest()


def room_seeds(creator: str, slot: int | None = None) -> tuple[bytes, ...]:
    """Seeds for a room's storage address and escrow authority."""
    seeds = (ROOM_SEED_TAG, address_to_bytes(creator))
    if slot is None:
        return seeds
    return (*seeds, bytes([slot]))


def derive_program_address(seeds: Sequence[bytes], program_id: str) -> str:
    """SHA-256 over length-framed seeds, the owning program id and a domain marker."""
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(len(seed).to_bytes(1, byteorder="little"))
        hasher.update(seed)
    hasher.update(address_to_bytes(program_id))
    hasher.update(_DERIVATION_MARKER)
    return hasher.hexdigest()
