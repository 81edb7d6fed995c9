"""
core/session.py

Widget session state and the request lifecycle.
- Turn: one immutable history entry {role, content}
- WidgetState: panel visibility, draft buffer and the in-flight guard
- SessionStore: ordered history plus one outstanding chat request at a time

Every submit appends exactly two turns (user, placeholder) and later replaces the
placeholder in place, so the history alternates user/assistant after the greeting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests
from pydantic import ValidationError

from core.schemas import ChatErr, ChatOk, ChatRequest


logger = logging.getLogger(__name__)

HISTORY_WINDOW = 4
TYPING = "…"
DEFAULT_GREETING = (
    "Hi — I’m the EastersAI Reselling Robot. Ask: “I found a Nintendo Switch for $100 "
    "in 15210 — should I buy it?”"
)

NETWORK_ERROR = "Server error. Try again in a moment."
NON_JSON_ERROR = "Non-JSON response"


@dataclass(frozen=True)
class Turn:
    role: str
    content: str

    def as_wire(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class WidgetState:
    open: bool = False
    draft_text: str = ""
    in_flight: bool = False


def _format_seconds(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def classify_response(status_code: int, ok: bool, body) -> str:
    """Map an HTTP outcome to the assistant text that replaces the placeholder.

    `body` is the decoded JSON, or None when the payload was not JSON.
    """
    if not ok:
        return f"Server error ({status_code})."
    if not isinstance(body, dict):
        return f"Error: {NON_JSON_ERROR}."
    try:
        if body.get("success") is True:
            return ChatOk.model_validate(body).data.reply
        err = ChatErr.model_validate(body)
    except ValidationError:
        return f"Error: {NON_JSON_ERROR}."
    suffix = ""
    if err.retry_after_seconds:
        suffix = f" Retry after ~{_format_seconds(err.retry_after_seconds)}s."
    return f"Error: {err.error}.{suffix}"


class SessionStore:
    """Conversation history and UI state for one widget instance."""

    def __init__(self, client, greeting: str | None = DEFAULT_GREETING):
        self.client = client
        self.state = WidgetState()
        self._turns: list[Turn] = []
        self._pending: int | None = None
        if greeting:
            self._turns.append(Turn("assistant", greeting))

    @property
    def history(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def pending_index(self) -> int | None:
        """Position of the placeholder turn while a request is outstanding."""
        return self._pending

    def recent_history(self, limit):
        """Return the last N turns."""
        if limit <= 0:
            return []
        return self._turns[-limit:]

    def wire_history(self, limit=HISTORY_WINDOW):
        return [t.as_wire() for t in self.recent_history(limit)]

    def toggle_open(self) -> bool:
        self.state.open = not self.state.open
        return self.state.open

    def update_draft(self, text: str) -> None:
        self.state.draft_text = text

    async def submit(self, raw_text: str) -> Turn | None:
        """Send one user message. Blank input or a request already in flight is a no-op."""
        message = (raw_text or "").strip()
        if not message or self.state.in_flight:
            return None

        # Context is taken before the new pair is appended.
        request = ChatRequest(message=message, history=self.wire_history(HISTORY_WINDOW))

        self.state.draft_text = ""
        self.state.in_flight = True
        self._turns.append(Turn("user", message))
        self._turns.append(Turn("assistant", TYPING))
        self._pending = len(self._turns) - 1
        logger.info("Submitting message (len=%s, history=%s)", len(message), len(request.history))

        content = NETWORK_ERROR
        try:
            response = await self.client.send(request.model_dump())
            content = classify_response(response.status_code, response.ok, _decode(response))
        except requests.RequestException as exc:
            logger.warning("Chat request failed: %s", exc)
        except Exception:
            logger.exception("Unexpected failure while handling chat response")
        finally:
            turn = self._resolve(content)
            self.state.in_flight = False
        return turn

    def _resolve(self, content: str) -> Turn:
        turn = Turn("assistant", content)
        if self._pending is not None:
            self._turns[self._pending] = turn
        self._pending = None
        return turn


def _decode(response):
    try:
        return response.json()
    except ValueError:
        return None
