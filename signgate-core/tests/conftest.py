"""
Shared fixtures for signgate-core tests.
"""

import pytest

from signgate_core.config import GateConfig
from signgate_core.replay import InMemoryReplayGuard
from signgate_core.signing import RequestGate

NOW = 1_700_000_000
TOKEN = "tok-alice"


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuth:
    """In-memory Auth collaborator: token -> user, optional permission set."""

    def __init__(self, tokens=None, permissions=None):
        self.tokens = tokens if tokens is not None else {TOKEN: "alice"}
        self.permissions = permissions  # None allows every path
        self.request_uri = ""
        self.user = None
        self.init_calls = []

    def set_request_uri(self, path):
        self.request_uri = path

    def init(self, token):
        self.init_calls.append(token)
        self.user = self.tokens.get(token)
        return self.user is not None

    def is_login(self):
        return self.user is not None

    def match(self, patterns, path=None):
        action = (path or self.request_uri).split("/")[-1]
        names = [p.lower() for p in patterns]
        return "*" in names or action in names

    def check(self, path):
        return self.permissions is None or path in self.permissions


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def replay_guard(clock):
    return InMemoryReplayGuard(clock=clock)


@pytest.fixture
def gate(replay_guard):
    return RequestGate(replay_guard, config=GateConfig(sign_expire=500), clock=lambda: NOW)


@pytest.fixture
def auth():
    return FakeAuth()
