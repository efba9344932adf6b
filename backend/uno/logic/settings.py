"""Centralized engine settings - rule variant, economics and storage limits."""

from pydantic import BaseModel, ConfigDict, Field

from uno.ledger.addresses import MAX_ROOM_SLOTS, Address, address_for_name
from uno.logic.enums import GameVariant, ShuffleSource

MIN_PLAYERS = 2
MAX_PLAYERS = 4
RECORD_CAPACITY = 512
BASIS_POINTS = 10_000
DEFAULT_PLATFORM_FEE_BPS = 500  # 5%
MAX_AMOUNT = (1 << 64) - 1  # balances are unsigned 64-bit on the ledger

# Operator account receiving the platform cut. Claims naming any other
# account are rejected.
PLATFORM_ACCOUNT = address_for_name("uno-platform-treasury")


class EngineSettings(BaseModel):
    """
    Configuration for one engine deployment.

    All fields default to the canonical deployment: rules enforced on the
    engine, 512-byte records, a 5% platform cut.
    """

    model_config = ConfigDict(frozen=True)

    variant: GameVariant = GameVariant.ON_ENGINE
    record_capacity: int = Field(default=RECORD_CAPACITY, ge=64)
    platform_fee_bps: int = Field(default=DEFAULT_PLATFORM_FEE_BPS, ge=0, lt=BASIS_POINTS)
    platform_account: Address = PLATFORM_ACCOUNT
    shuffle_source: ShuffleSource = ShuffleSource.SECURE
    max_room_slots: int = Field(default=MAX_ROOM_SLOTS, ge=1, le=256)
    operation_ttl_seconds: int = Field(default=300, ge=1)
    max_external_game_id_length: int = Field(default=64, ge=1, le=128)
