"""Unit tests for reply classification and view building."""

import json

import pytest

from core.render import (
    StructuredView,
    TextView,
    parse_structured,
    render_history,
    render_turn,
    view_lines,
)
from core.session import Turn


@pytest.mark.unit
class TestParseStructured:
    """Tests for parse_structured."""

    def test_valid_payload(self, structured_reply):
        result = parse_structured(structured_reply)
        assert result is not None
        assert result.cards[0].title == "Estimate"
        assert result.next_question == "What condition?"

    def test_surrounding_whitespace_allowed(self, structured_reply):
        assert parse_structured(f"\n  {structured_reply}  \n") is not None

    @pytest.mark.parametrize(
        "content",
        [
            "Looks like a fair price.",
            "",
            None,
            '{"version":2,"cards":[]}',
            '{"version":"1","cards":[]}',
            '{"version":true,"cards":[]}',
            '{"version":1}',
            '{"version":1,"cards":{}}',
            '{"version":1,"cards":[}',
            'Answer: {"version":1,"cards":[]}',
            '{"version":1,"cards":[{"rows":"nope"}]}',
        ],
    )
    def test_rejected_as_plain_text(self, content):
        assert parse_structured(content) is None

    def test_minimal_payload(self):
        result = parse_structured('{"version":1,"cards":[]}')
        assert result is not None
        assert result.cards == []
        assert result.next_question is None

    def test_unknown_fields_tolerated_and_kept(self):
        payload = {
            "version": 1,
            "cards": [],
            "confidence": 0.7,
            "sources": [{"name": "eBay sold", "type": "api", "summary": "30 day comps", "url": "x"}],
            "missing": ["zip"],
        }
        result = parse_structured(json.dumps(payload))

        assert result is not None
        assert json.loads(result.to_json()) == payload

    def test_numeric_row_values_kept_as_received(self):
        content = '{"version":1,"cards":[{"id":"c","title":"T","rows":[{"id":"r","label":"Qty","value":3}]}]}'
        result = parse_structured(content)

        assert result.cards[0].rows[0].value == 3
        assert json.loads(result.to_json())["cards"][0]["rows"][0]["value"] == 3
        assert view_lines(render_turn(Turn("assistant", content))) == ["T", "Qty: 3"]

    @pytest.mark.parametrize(
        "extra",
        [
            {"missing": None},
            {"sources": None},
            {"intent": 7},
            {"next_question": 5},
            {"sources": [{"name": "eBay", "type": "scraped", "summary": None}]},
            {"missing": "zip"},
        ],
    )
    def test_side_fields_do_not_disqualify(self, extra):
        payload = {
            "version": 1,
            "cards": [{"id": "c1", "title": "Estimate", "rows": [{"id": "r1", "label": "Price", "value": "$40"}]}],
            **extra,
        }
        view = render_turn(Turn("assistant", json.dumps(payload)))

        assert isinstance(view, StructuredView)
        assert view.cards[0].title == "Estimate"
        assert json.loads(view.result.to_json()) == payload

    def test_null_row_value_renders_empty(self):
        payload = {"version": 1, "cards": [{"id": "c", "title": "T", "rows": [{"id": "r", "label": "Price", "value": None}]}]}
        view = render_turn(Turn("assistant", json.dumps(payload)))

        assert isinstance(view, StructuredView)
        assert view_lines(view) == ["T", "Price: "]

    def test_non_string_next_question_rendered(self):
        view = render_turn(Turn("assistant", '{"version":1,"cards":[],"next_question":5}'))
        assert view.next_question_line == "Next question: 5"

    @pytest.mark.parametrize(
        "content",
        [
            '{"version":1,"cards":[null]}',
            '{"version":1,"cards":[{"title":"T","rows":[7]}]}',
            '{"version":1,"cards":[{"title":"T","rows":null}]}',
        ],
    )
    def test_malformed_cards_disqualify(self, content):
        assert parse_structured(content) is None


@pytest.mark.unit
class TestRenderTurn:
    """Tests for render_turn and view_lines."""

    def test_structured_card_view(self, structured_reply):
        view = render_turn(Turn("assistant", structured_reply))

        assert isinstance(view, StructuredView)
        assert len(view.cards) == 1
        assert view.cards[0].title == "Estimate"
        assert [r.text for r in view.cards[0].rows] == ["Price: $40"]
        assert view.next_question_line == "Next question: What condition?"
        assert view.intent == "worth_it"
        assert view_lines(view) == ["Estimate", "Price: $40", "Next question: What condition?"]

    def test_wrong_version_renders_raw(self):
        raw = '{"version":2,"cards":[]}'
        view = render_turn(Turn("assistant", raw))

        assert isinstance(view, TextView)
        assert view.text == raw
        assert view_lines(view) == [raw]

    def test_plain_text_verbatim(self):
        raw = "  **Buy it** <b>now</b>\n"
        view = render_turn(Turn("assistant", raw))
        assert view == TextView(role="assistant", text=raw)

    def test_user_turn_never_structured(self, structured_reply):
        view = render_turn(Turn("user", structured_reply))
        assert isinstance(view, TextView)
        assert view.role == "user"

    def test_rows_and_cards_keep_order(self):
        payload = {
            "version": 1,
            "cards": [
                {"id": "a", "title": "First", "rows": [
                    {"id": "1", "label": "A", "value": "1"},
                    {"id": "2", "label": "B", "value": "2"},
                ]},
                {"id": "b", "title": "Second", "rows": []},
            ],
        }
        view = render_turn(Turn("assistant", json.dumps(payload)))
        assert view_lines(view) == ["First", "A: 1", "B: 2", "Second"]

    def test_unknown_intent_dropped_from_view(self):
        view = render_turn(Turn("assistant", '{"version":1,"intent":"haggle","cards":[]}'))
        assert isinstance(view, StructuredView)
        assert view.intent is None

    def test_render_history_is_idempotent(self, structured_reply):
        turns = [Turn("assistant", "hi"), Turn("user", "q"), Turn("assistant", structured_reply)]

        first = render_history(turns)
        second = render_history(turns)

        assert first == second
        assert turns[2].content == structured_reply
