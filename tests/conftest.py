"""Pytest configuration - put the project root on sys.path and provide fixtures."""
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeTransport:
    """Records commands instead of sending them."""

    def __init__(self, succeed=True):
        self.succeed = succeed
        self.sent = []

    def send_command(self, command):
        self.sent.append(command)
        return self.succeed


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def failing_transport():
    return FakeTransport(succeed=False)


@pytest.fixture
def eq_fields():
    """Parametric EQ request for input 1, band 0 as a bell, with every UI field filled in."""
    return {
        "channelType": "input",
        "input": 0,
        "band": 0,
        "band0Type": "bell",
        "band0Frequency": 72,
        "band0Width": 0.5,
        "band0Gain": 3.0,
        "band1Frequency": 10,
        "band1Width": 1.0,
        "band1Gain": -2.0,
        "band3Type": "hf_shelf",
    }
