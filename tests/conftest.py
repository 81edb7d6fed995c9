"""
Pytest configuration and shared fixtures.
"""

import asyncio
import json

import pytest
import requests

from core.session import SessionStore

# ============================================================================
# Transport fakes
# ============================================================================


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._body = body
        self._text = text

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        if self._body is None:
            raise requests.JSONDecodeError("Expecting value", "", 0)
        return self._body


class FakeClient:
    """Async chat client returning queued outcomes (responses or exceptions)."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.payloads = []
        self.gate = None

    async def send(self, payload):
        self.payloads.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def store(fake_client):
    """Session store with the default greeting, wired to a fake client."""
    return SessionStore(fake_client)


@pytest.fixture
def gated_client():
    """Fake client that blocks inside send until `client.gate` is set."""
    client = FakeClient()
    client.gate = asyncio.Event()
    return client


# ============================================================================
# Payload fixtures
# ============================================================================


@pytest.fixture
def structured_reply():
    return json.dumps(
        {
            "version": 1,
            "intent": "worth_it",
            "cards": [
                {
                    "id": "c1",
                    "title": "Estimate",
                    "rows": [{"id": "r1", "label": "Price", "value": "$40"}],
                }
            ],
            "missing": [],
            "next_question": "What condition?",
            "sources": [],
        }
    )
