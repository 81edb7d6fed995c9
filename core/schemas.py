"""
core/schemas.py

Wire shapes shared by the widget and the chat backend.

Models:
- ChatRequest: outbound body {message, history, live}
- ChatOk / ChatErr: the two halves of the response envelope
- StructuredResult: card payload an assistant reply may carry as JSON text;
  only version and cards are checked, the rest is carried as received
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator


Role = Literal["user", "assistant"]

# Tags the backend is known to send; not enforced when parsing.
INTENTS = ("worth_it", "listing", "shipping", "sourcing", "general")


class HistoryItem(BaseModel):
    role: Role
    content: str


class ChatRequest(BaseModel):
    message: str
    history: list[HistoryItem] = Field(default_factory=list, max_length=4)
    live: bool = True


class ReplyData(BaseModel):
    reply: str


class ChatOk(BaseModel):
    success: Literal[True]
    data: ReplyData


class ChatErr(BaseModel):
    success: Literal[False]
    error: str = "Unknown error"
    # Free-form hint; never shown, so any shape is accepted.
    retry_after: Any = None
    retry_after_seconds: Optional[Union[StrictInt, StrictFloat]] = None

    @field_validator("retry_after_seconds", mode="before")
    @classmethod
    def _numbers_only(cls, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


# Structured Result. Only `version` and `cards` decide whether a reply is
# structured; every other field is carried as received. Unknown keys are kept
# so a parsed result re-serializes without losing anything the backend sent.


class Row(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = ""
    label: Any = ""
    value: Any = ""


class Card(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = ""
    title: Any = ""
    rows: list[Row] = Field(default_factory=list)


class StructuredResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: Literal[1]
    intent: Any = None
    cards: list[Card]
    missing: Any = Field(default_factory=list)
    next_question: Any = None
    # [{name, type: api|manual|none, summary}]; not rendered.
    sources: Any = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize back to the wire form, keeping only what was received."""
        return self.model_dump_json(exclude_unset=True)
