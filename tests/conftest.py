"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

TOKEN_ADDRESS = "0x" + "ab" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20


@pytest.fixture
def bridge():
    """Create EventBridge with Transfer and Approval queues."""
    from ethblocks.event_bridge import EventBridge

    br = EventBridge()
    br.register_event_type("Transfer")
    br.register_event_type("Approval")
    return br


@pytest.fixture
def make_occurrence():
    """Factory for EventOccurrences."""
    from ethblocks.models import EventOccurrence

    def _make(event_type="Transfer", correlation_id="0x01", **fields):
        return EventOccurrence(
            event_type=event_type,
            correlation_id=correlation_id,
            fields=fields,
        )

    return _make


@pytest.fixture
def mock_gateway():
    """Create mock contract gateway."""
    gateway = Mock()
    gateway.network_id = 3
    gateway.contract_address = TOKEN_ADDRESS
    gateway.call = AsyncMock(return_value=100)
    gateway.send = AsyncMock(return_value="0x" + "12" * 32)
    gateway.deploy = AsyncMock(return_value=TOKEN_ADDRESS)
    gateway.start = AsyncMock()
    gateway.stop = AsyncMock()
    return gateway


@pytest.fixture
def token_blocks(mock_gateway, bridge):
    """Create TokenBlocks over the mock gateway and a real bridge."""
    from ethblocks.blocks import TokenBlocks

    return TokenBlocks(
        gateway=mock_gateway,
        bridge=bridge,
        event_types=["Transfer", "Approval"],
    )


@pytest.fixture
def settings():
    """Settings that never touch the environment."""
    from ethblocks.config import Settings

    return Settings(event_types=["Transfer", "Approval"], poll_interval=0.01)


@pytest_asyncio.fixture
async def application(settings, mock_gateway):
    """Create and start an Application over the mock gateway."""
    from ethblocks.app import Application

    app = Application(settings=settings, gateway=mock_gateway)
    await app.start()
    yield app
    await app.stop()
