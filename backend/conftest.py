"""Session-wide test setup: .env.tests, structlog routed to caplog, clean log context."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from shared.logging import shared_processors

ENV_FILE = Path(__file__).resolve().parents[1] / ".env.tests"

load_dotenv(ENV_FILE)

# Events reach stdlib loggers as dicts, so tests read record.msg["event"].
structlog.configure(
    processors=shared_processors(),
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)


@pytest.fixture(autouse=True)
def _clear_log_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
