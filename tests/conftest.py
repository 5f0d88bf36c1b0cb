from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

# Ensure the package is importable when tests run from a source checkout
PROJECT_SRC = Path(__file__).resolve().parents[1] / "src"
if str(PROJECT_SRC) not in sys.path:
    sys.path.insert(0, str(PROJECT_SRC))


@pytest.fixture(scope="session")
def tests_root() -> Path:
    return Path(__file__).resolve().parent


@pytest.fixture
def debug_logging(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture tc_monitor log records at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger="tc_monitor")
    return caplog
