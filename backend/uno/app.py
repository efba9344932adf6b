"""Wire configuration, logging and a ledger into a ready RoomService."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shared.logging import setup_logging
from uno.config import EngineConfig
from uno.ledger.memory import InMemoryLedger
from uno.logic.service import RoomService

if TYPE_CHECKING:
    from uno.ledger.protocol import Ledger

logger = structlog.get_logger()


def create_service(config: EngineConfig | None = None, ledger: Ledger | None = None) -> RoomService:
    if config is None:  # pragma: no cover
        config = EngineConfig()  # ty: ignore[missing-argument]

    log_path = setup_logging(log_dir=config.log_dir)

    if ledger is None:
        ledger = InMemoryLedger()

    settings = config.to_engine_settings()
    logger.info(
        "room service ready",
        variant=settings.variant,
        platform_fee_bps=settings.platform_fee_bps,
        shuffle_source=settings.shuffle_source,
        log_file=str(log_path) if log_path else None,
    )
    return RoomService(ledger, config.operation_secret, settings)
