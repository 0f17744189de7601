from __future__ import annotations

import asyncio
import itertools
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from botbuilder_adapter_whatsapp.auth import store as auth_store

_serial = itertools.count(1)


@dataclass
class FakeMe:
    id: str
    name: str | None = None


@dataclass
class FakeCreds:
    noise_key: bytes = field(default_factory=lambda: next(_serial).to_bytes(4, "big"))
    registered: bool = False
    me: FakeMe | None = None


class FakeSocket:
    """Stands in for a protocol session; tests drive it with `fire`."""

    def __init__(self, auth: Any, *, fail_connect: Exception | None = None) -> None:
        self.auth = auth
        self.listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self.connected = False
        self.closed = False
        self._fail_connect = fail_connect

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self.listeners[event].append(listener)

    async def connect(self) -> None:
        if self._fail_connect is not None:
            raise self._fail_connect
        self.connected = True

    async def close(self) -> None:
        self.closed = True

    def fire(self, event: str, payload: Any = None) -> None:
        for listener in list(self.listeners[event]):
            listener(payload)


class FakeSocketFactory:
    def __init__(self) -> None:
        self.sockets: list[FakeSocket] = []
        self.fail_connect: Exception | None = None

    def __call__(self, *, auth: Any) -> FakeSocket:
        sock = FakeSocket(auth, fail_connect=self.fail_connect)
        self.sockets.append(sock)
        return sock

    @property
    def last(self) -> FakeSocket:
        return self.sockets[-1]


@pytest.fixture(autouse=True)
def fresh_creds(monkeypatch: pytest.MonkeyPatch) -> list[FakeCreds]:
    """Replace pyaileys credential generation with cheap fakes."""

    made: list[FakeCreds] = []

    def _init() -> FakeCreds:
        creds = FakeCreds()
        made.append(creds)
        return creds

    monkeypatch.setattr(auth_store, "init_auth_creds", _init)
    return made


@pytest.fixture
def sockets() -> FakeSocketFactory:
    return FakeSocketFactory()


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    async def _wait(predicate: Callable[[], bool], timeout_s: float = 1.0) -> None:
        async def _poll() -> None:
            while not predicate():
                await asyncio.sleep(0)

        await asyncio.wait_for(_poll(), timeout=timeout_s)

    return _wait
