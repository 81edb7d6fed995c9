"""
scripts/check_widget.py

Batch harness that drives the widget session against a live chat endpoint.

Runs a few scripted conversations through SessionStore and checks:
- Each submit grows the history by exactly two turns
- The in-flight flag is cleared once a submit resolves
- Turns alternate user/assistant after the greeting
- The outbound history window never exceeds four turns
- No placeholder turn is left behind

Usage:
  python3 scripts/check_widget.py

Configure the endpoint via env (same as runtime):
  CHAT_ENDPOINT=http://localhost:8787/api/chat
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Any


# Allow imports from project root
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from chat.client import ChatClient
from core.session import HISTORY_WINDOW, TYPING, SessionStore


class RecordingClient:
    """Wraps a client and keeps every payload sent."""

    def __init__(self, inner):
        self.inner = inner
        self.payloads: list[dict[str, Any]] = []

    async def send(self, payload):
        self.payloads.append(payload)
        return await self.inner.send(payload)


# ---- Metrics ----

def alternates(store: SessionStore) -> bool:
    turns = store.history
    start = 1 if turns and turns[0].role == "assistant" else 0
    expected = "user"
    for turn in turns[start:]:
        if turn.role != expected:
            return False
        expected = "assistant" if expected == "user" else "user"
    return True


def window_respected(payloads: list[dict[str, Any]]) -> bool:
    return all(len(p.get("history", [])) <= HISTORY_WINDOW for p in payloads)


def no_placeholder_left(store: SessionStore) -> bool:
    return store.pending_index is None and all(t.content != TYPING for t in store.history)


async def run_script(store: SessionStore, script: list[str]) -> dict[str, bool]:
    grew_by_two = True
    cleared = True
    for utter in script:
        before = len(store.history)
        await store.submit(utter)
        grew_by_two = grew_by_two and len(store.history) == before + 2
        cleared = cleared and not store.state.in_flight
    return {"grew_by_two": grew_by_two, "in_flight_cleared": cleared}


async def run_scenarios(client=None) -> list[dict[str, Any]]:
    results: list[dict[str, Any]] = []
    scripts = {
        "worth_it": ["I found a Nintendo Switch for $100 in 15210 — should I buy it?", "It's used, good condition"],
        "long_chat": [f"Question {i}: what sells best this week?" for i in range(8)],
    }
    for name, script in scripts.items():
        recorder = RecordingClient(client or ChatClient())
        store = SessionStore(recorder)
        row: dict[str, Any] = {"scenario": name}
        row.update(await run_script(store, script))
        row["alternates"] = alternates(store)
        row["window<=4"] = window_respected(recorder.payloads)
        row["no_placeholder"] = no_placeholder_left(store)
        results.append(row)
    return results


def main():
    results = asyncio.run(run_scenarios())
    ok = True
    for row in results:
        scenario = row.pop("scenario")
        flags = [f"{k}={'OK' if v else 'FAIL'}" for k, v in row.items()]
        print(f"{scenario}: " + ", ".join(flags))
        ok = ok and all(bool(v) for v in row.values())
    if not ok:
        sys.exit(2)


if __name__ == "__main__":
    main()
