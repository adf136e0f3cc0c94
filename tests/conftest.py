"""Pytest configuration and fixtures.

Provides environment isolation and a small recording double for checking
call order. Fixtures here are autouse unless noted.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import dataclass, field
import os
from typing import Any

import pytest

from composable_functions import config as config_module

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class CallRecorder:
    """Records start/finish events of async callables for ordering checks."""

    events: list[str] = field(default_factory=list)

    def step(self, name: str, value: Any = None, *, delay: float = 0.0):
        """Return an async function logging ``start:name``/``end:name``.

        It returns *value* when given, otherwise its own input.
        """

        async def run(x: Any = None, *_context: Any) -> Any:
            self.events.append(f"start:{name}")
            await asyncio.sleep(delay)
            self.events.append(f"end:{name}")
            return x if value is None else value

        run.__qualname__ = name
        return run

    def failing(self, name: str, message: str, *, delay: float = 0.0):
        """Return an async function that raises ValueError(message)."""

        async def run(*_args: Any) -> Any:
            self.events.append(f"start:{name}")
            await asyncio.sleep(delay)
            self.events.append(f"end:{name}")
            raise ValueError(message)

        run.__qualname__ = name
        return run


@pytest.fixture
def recorder() -> CallRecorder:
    """Fresh CallRecorder per test (not autouse)."""
    return CallRecorder()


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_config_env(monkeypatch):
    """Clear COMPOSABLE_* env vars and the cached default Config."""
    for key in list(os.environ.keys()):
        if key.startswith("COMPOSABLE_"):
            monkeypatch.delenv(key, raising=False)
    config_module._default_config.cache_clear()
    yield
    config_module._default_config.cache_clear()
