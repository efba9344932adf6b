"""Engine process configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from uno.ledger.addresses import Address
from uno.logic.enums import GameVariant, ShuffleSource
from uno.logic.settings import DEFAULT_PLATFORM_FEE_BPS, PLATFORM_ACCOUNT, RECORD_CAPACITY, EngineSettings


class EngineConfig(BaseSettings):
    model_config = {"env_prefix": "UNO_"}

    # HMAC secret shared with the signing gateway -- required, no default.
    # The engine refuses to start if UNO_OPERATION_SECRET is not set.
    operation_secret: str = Field(min_length=1)

    variant: GameVariant = GameVariant.ON_ENGINE
    platform_fee_bps: int = Field(default=DEFAULT_PLATFORM_FEE_BPS, ge=0, lt=10_000)
    platform_account: Address = PLATFORM_ACCOUNT
    shuffle_source: ShuffleSource = ShuffleSource.SECURE
    record_capacity: int = Field(default=RECORD_CAPACITY, ge=64)
    operation_ttl_seconds: int = Field(default=300, ge=1)
    log_dir: str | None = None

    def to_engine_settings(self) -> EngineSettings:
        return EngineSettings(
            variant=self.variant,
            record_capacity=self.record_capacity,
            platform_fee_bps=self.platform_fee_bps,
            platform_account=self.platform_account,
            shuffle_source=self.shuffle_source,
            operation_ttl_seconds=self.operation_ttl_seconds,
        )
