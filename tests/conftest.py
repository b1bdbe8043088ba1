import logging
import os
from pathlib import Path
import sys

import pytest

# Ensure the src/ layout is importable without installing the package
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("STICKYBUS_DISABLE_TRACING", "1")

from stickybus.bus import EventBus  # noqa: E402
from stickybus.config import BusSettings, _config_adapter, get_bus_settings  # noqa: E402
from stickybus.observability.metrics import reset_metrics  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_config_and_metrics(monkeypatch):
    # Prevent tests from reading a developer's real .env file.
    monkeypatch.setenv("STICKYBUS_DOTENV_PATH", str(ROOT / "tests" / ".env.DO_NOT_USE"))
    for key in [
        "STICKYBUS_CONFIG",
        "STICKYBUS_EXECUTOR_KEEPALIVE_SECONDS",
        "STICKYBUS_THREAD_NAME_PREFIX",
        "STICKYBUS_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)
    _config_adapter.cache_clear()
    get_bus_settings.cache_clear()
    reset_metrics()
    yield
    _config_adapter.cache_clear()
    get_bus_settings.cache_clear()


@pytest.fixture
def bus():
    event_bus = EventBus(settings=BusSettings(executor_keepalive_seconds=1.0))
    yield event_bus
    event_bus.shutdown(timeout=5.0)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
