"""
core/render.py

Classify assistant replies and build what the widget shows for each turn.

Functions:
- parse_structured(content): returns a StructuredResult when the text is a valid card
  payload (version 1 with a cards list), otherwise None. A payload that looks like JSON
  but fails validation is treated as plain text, never as an error.
- render_turn(turn) / render_history(turns): pure view builders, safe to call on every redraw.
- view_lines(view): flatten a view into printable lines.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from core.schemas import INTENTS, StructuredResult
from core.session import Turn


logger = logging.getLogger(__name__)

NEXT_QUESTION_PREFIX = "Next question: "


@dataclass(frozen=True)
class RowView:
    label: str
    value: str

    @property
    def text(self) -> str:
        return f"{self.label}: {self.value}"


@dataclass(frozen=True)
class CardView:
    title: str
    rows: tuple[RowView, ...] = ()


@dataclass(frozen=True)
class TextView:
    role: str
    text: str
    kind: str = "text"


@dataclass(frozen=True)
class StructuredView:
    cards: tuple[CardView, ...]
    next_question: str | None = None
    intent: str | None = None
    result: StructuredResult | None = field(default=None, compare=False, repr=False)
    role: str = "assistant"
    kind: str = "structured"

    @property
    def next_question_line(self) -> str | None:
        if self.next_question is None:
            return None
        return f"{NEXT_QUESTION_PREFIX}{self.next_question}"


def parse_structured(content: str | None) -> StructuredResult | None:
    """Return the parsed card payload, or None when the text should render as-is."""
    text = (content or "").strip()
    # Most replies are prose; skip the parse attempt for them.
    if not text.startswith("{") or not text.endswith("}"):
        return None
    try:
        obj = json.loads(text)
    except ValueError:
        return None
    if not isinstance(obj, dict):
        return None
    version = obj.get("version")
    if isinstance(version, bool) or version != 1:
        return None
    if not isinstance(obj.get("cards"), list):
        return None
    try:
        return StructuredResult.model_validate(obj)
    except ValidationError as exc:
        logger.debug("Structured payload rejected, rendering as text: %s", exc.error_count())
        return None


def _as_text(value) -> str:
    """Display form of a card field: strings as-is, null empty, anything else as JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def render_turn(turn: Turn):
    """Build the view for one turn. User turns are always plain text."""
    if turn.role != "assistant":
        return TextView(role=turn.role, text=turn.content)
    result = parse_structured(turn.content)
    if result is None:
        return TextView(role=turn.role, text=turn.content)
    cards = tuple(
        CardView(
            title=_as_text(c.title),
            rows=tuple(RowView(label=_as_text(r.label), value=_as_text(r.value)) for r in c.rows),
        )
        for c in result.cards
    )
    intent = result.intent if isinstance(result.intent, str) and result.intent in INTENTS else None
    next_question = None if result.next_question is None else _as_text(result.next_question)
    return StructuredView(cards=cards, next_question=next_question, intent=intent, result=result)


def render_history(turns) -> list:
    return [render_turn(t) for t in turns]


def view_lines(view) -> list[str]:
    """Printable lines: card title, then 'label: value' rows, then the follow-up question."""
    if isinstance(view, TextView):
        return [view.text]
    lines: list[str] = []
    for card in view.cards:
        lines.append(card.title)
        lines.extend(row.text for row in card.rows)
    if view.next_question_line is not None:
        lines.append(view.next_question_line)
    return lines
