"""
Configuration file for pytest.
This file ensures the project root is in the Python path.
"""

import os
import sys

import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.storage import ConnectorStorage, MemoryBackend  # noqa: E402
from tests.fakes import FakeProvider  # noqa: E402

ACCOUNT = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
CHECKSUM_ACCOUNT = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


@pytest.fixture
def storage():
    return ConnectorStorage(MemoryBackend(), key="wagmi")


@pytest.fixture
def provider():
    return FakeProvider(accounts=[ACCOUNT], chain_id="0x1")
