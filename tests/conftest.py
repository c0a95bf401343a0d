import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from demoapp.api.config import Config
from demoapp.api.services import ValueService


class StubValueService(ValueService):
    """Value service returning a fixed, test-chosen string."""

    def __init__(self, value: str):
        self.value = value
        self.calls = 0

    def get_value(self) -> str:
        self.calls += 1
        return self.value


@pytest.fixture
def config(monkeypatch):
    for name in ("DEMOAPP_HOST", "DEMOAPP_PORT", "DEMOAPP_LOG_LEVEL", "DEMOAPP_TITLE"):
        monkeypatch.delenv(name, raising=False)
    return Config(_env_file=None)


@pytest.fixture
def stub_service():
    return StubValueService("Hello stubworld")


@pytest.fixture
def make_stub():
    """Build stub value services returning the given string."""
    return StubValueService
