"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Generator
from datetime import timedelta
from typing import Callable, List

import pytest
from loguru import logger

from core.models import SupervisedProcess
from supervisor.process import (
    DescendantDiscoverer,
    SignalDispatcher,
    StaticSnapshotProvider,
    TreeController,
)

from tests.helpers import PROCESS_TABLE, FakeClock, RecordingBackend

# =============================================================================
# Test Collection Hooks
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Add the 'unit' marker to tests without another marker."""
    for item in items:
        if not any(mark.name == "integration" for mark in item.iter_markers()):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend(alive=[pid for pid, _ in PROCESS_TABLE])


@pytest.fixture
def dispatcher(backend: RecordingBackend) -> SignalDispatcher:
    return SignalDispatcher(backend=backend)


@pytest.fixture
def discoverer() -> DescendantDiscoverer:
    return DescendantDiscoverer(provider=StaticSnapshotProvider(PROCESS_TABLE))


@pytest.fixture
def controller(dispatcher: SignalDispatcher, discoverer: DescendantDiscoverer) -> TreeController:
    return TreeController(dispatcher=dispatcher, discoverer=discoverer)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_process() -> Callable[..., SupervisedProcess]:
    """Factory for supervised processes with second-based durations."""

    def _make(
        pid: int = 100,
        check_command: str = "/bin/false",
        delay: float = 0,
        interval: float = 1,
        timeout: float = 0,
    ) -> SupervisedProcess:
        return SupervisedProcess(
            pid=pid,
            check_command=check_command,
            check_delay=timedelta(seconds=delay),
            check_interval=timedelta(seconds=interval),
            check_timeout=timedelta(seconds=timeout),
        )

    return _make


@pytest.fixture
def log_messages() -> Generator[List[str], None, None]:
    """Capture loguru messages emitted during the test."""
    messages: List[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]), level="TRACE"
    )
    try:
        yield messages
    finally:
        logger.remove(handler_id)
