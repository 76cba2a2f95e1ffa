"""
Shared fixtures: a controllable clock, a fresh quota tracker, a fake AI
rewriter, and a TestClient wired to both through dependency overrides.
"""

import pytest
from fastapi.testclient import TestClient

from improver.main import app
from improver.middleware import limiter
from improver.improve.ai_service import AIResult, get_ai_rewriter
from improver.improve.quota import InMemoryQuotaStore, QuotaTracker, get_quota_tracker

START = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeRewriter:
    def __init__(self, result: AIResult):
        self.result = result
        self.calls = []

    async def rewrite(self, idea: str, lang: str) -> AIResult:
        self.calls.append((idea, lang))
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryQuotaStore()


@pytest.fixture
def tracker(store, clock):
    return QuotaTracker(store, clock=clock)


@pytest.fixture
def rewriter():
    return FakeRewriter(AIResult(ok=True, text="Build-ready website prompt:\n1) Website type: Store"))


@pytest.fixture
def client(tracker, rewriter):
    app.dependency_overrides[get_quota_tracker] = lambda: tracker
    app.dependency_overrides[get_ai_rewriter] = lambda: rewriter
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()
