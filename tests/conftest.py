"""Global pytest configuration."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Generator

import pytest

from phishscan.analyzer.metrics import metrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None, None, None]:
    """Keep the process-wide metrics collector isolated per test."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):  # type: ignore[override]
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        testargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(pyfuncitem.obj(**testargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring asyncio support")
