from __future__ import annotations

import asyncio
import importlib
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))


@pytest.fixture
def backend_module(monkeypatch):
    monkeypatch.setenv("SEVA_AGENT_ID", "agent-test")
    monkeypatch.setenv("SEVA_AGENT_API_URL", "http://agent.invalid/api/agent")
    monkeypatch.setenv("SEVA_LOG_JSON", "false")
    monkeypatch.setenv("SEVA_LOG_LEVEL", "WARNING")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def agent_reply(backend_module) -> Callable[[Any], list[dict[str, Any]]]:
    """Route the backend's outbound agent call to a canned envelope and record each call."""

    def _install(envelope: Any) -> list[dict[str, Any]]:
        calls: list[dict[str, Any]] = []

        async def _fake_call(text: str, agent_id: str, options: dict[str, str]) -> Any:
            calls.append({"text": text, "agent_id": agent_id, "options": dict(options)})
            if isinstance(envelope, Exception):
                raise envelope
            return envelope

        backend_module.container.agent_call = _fake_call
        return calls

    return _install


class ScriptedAgent:
    """Outbound call double whose replies are released one at a time by the test."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, str]]] = []
        self._pending: list[Any] = []
        self._gate: asyncio.Event | None = None

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    def queue(self, *envelopes: Any) -> None:
        self._pending.extend(envelopes)

    async def __call__(self, text: str, agent_id: str, options: dict[str, str]) -> Any:
        self.calls.append((text, agent_id, dict(options)))
        if self._gate is not None:
            await self._gate.wait()
        envelope = self._pending.pop(0) if self._pending else {"response": {"result": {"message": "ok"}}}
        if isinstance(envelope, Exception):
            raise envelope
        return envelope


@pytest.fixture
def scripted_agent() -> ScriptedAgent:
    return ScriptedAgent()

