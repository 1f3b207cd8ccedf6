"""Root conftest: test environment variables and the structlog pipeline used under pytest."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from core.logging import configure_structlog

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

# Same processors as production minus timestamps; caplog captures through stdlib logging.
configure_structlog(timestamps=False)


@pytest.fixture(autouse=True)
def _isolated_log_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
