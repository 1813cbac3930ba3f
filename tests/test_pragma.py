"""Tests for the pragma grammar in scatr.pragma."""

import pytest

from scatr.pragma import Detail, Pragma, is_issue_code, parse_details, parse_pragma


def _pragma(**issues: list[Detail]) -> Pragma:
    """Build an unhit pragma; keyword names use ``_`` for ``-``."""
    p = Pragma()
    for code, details in issues.items():
        p.add(code.replace("_", "-"), details)
    return p


# ---------------------------------------------------------------------------
# is_issue_code()
# ---------------------------------------------------------------------------


class TestIsIssueCode:
    @pytest.mark.parametrize(
        "token", ["GO-W1000", "PY-1234", "RS-E1017", "CXX-S111", "JS-W1", "VUE-W1002"]
    )
    def test_valid(self, token: str) -> None:
        assert is_issue_code(token)

    @pytest.mark.parametrize(
        "token", ["issue-code", "GO-W12345", "GO-WW100", "GOW1000", "", " GO-W1000", "GO-W1000x"]
    )
    def test_invalid(self, token: str) -> None:
        assert not is_issue_code(token)


# ---------------------------------------------------------------------------
# parse_pragma()
# ---------------------------------------------------------------------------


class TestParsePragma:
    def test_invalid(self) -> None:
        assert parse_pragma("foobar") is None

    def test_empty(self) -> None:
        assert parse_pragma("") is None

    def test_without_column_or_message(self) -> None:
        got = parse_pragma("[GO-W1000]")
        assert got == _pragma(GO_W1000=[])
        assert got is not None
        assert got.hit == {"GO-W1000": False}

    def test_only_columns(self) -> None:
        assert parse_pragma("[GO-W1000]: 1, 2") == _pragma(
            GO_W1000=[Detail(column=1), Detail(column=2)]
        )

    def test_only_message(self) -> None:
        assert parse_pragma('[GO-W1000]: "hello"') == _pragma(GO_W1000=[Detail(message="hello")])

    def test_messages_and_columns(self) -> None:
        assert parse_pragma('[GO-W1000]: 1 "hello", 2 "world"') == _pragma(
            GO_W1000=[Detail(1, "hello"), Detail(2, "world")]
        )

    def test_mixed_messages_and_columns(self) -> None:
        assert parse_pragma('[GO-W1000]: 1 "Hello", 2, "World"') == _pragma(
            GO_W1000=[Detail(1, "Hello"), Detail(2, ""), Detail(0, "World")]
        )

    def test_message_before_column(self) -> None:
        assert parse_pragma('[GO-W1000]: "Hello" 7') == _pragma(GO_W1000=[Detail(7, "Hello")])

    def test_multiple_codes(self) -> None:
        assert parse_pragma('[GO-W1000]: 1 "Hello", 2, "World"; [GO-W1001]: "Hello"') == _pragma(
            GO_W1000=[Detail(1, "Hello"), Detail(2, ""), Detail(0, "World")],
            GO_W1001=[Detail(0, "Hello")],
        )

    def test_trailing_semicolon(self) -> None:
        assert parse_pragma('[GO-W1000]: 1; [GO-W1001]: "Hello";') == _pragma(
            GO_W1000=[Detail(1)], GO_W1001=[Detail(0, "Hello")]
        )

    def test_last_segment_invalid(self) -> None:
        assert parse_pragma('[GO-W1000]: 1 "Hello"; [GO-W1001]: "Hello"; invalid pragma?') == (
            _pragma(GO_W1000=[Detail(1, "Hello")], GO_W1001=[Detail(0, "Hello")])
        )

    def test_first_segment_invalid(self) -> None:
        assert parse_pragma('invalid pragma; [GO-W1000]: 1 "Hello"; [GO-W1001]: "Hello"') == (
            _pragma(GO_W1000=[Detail(1, "Hello")], GO_W1001=[Detail(0, "Hello")])
        )

    def test_leading_free_text(self) -> None:
        assert parse_pragma("noqa, expect [PY-W1000]: 4") == _pragma(PY_W1000=[Detail(4)])

    def test_quote_escaping(self) -> None:
        assert parse_pragma(r'[GO-W1000]: 1 "Hello \"World\""; [GO-W1001]: 1 "Foo"') == _pragma(
            GO_W1000=[Detail(1, 'Hello "World"')], GO_W1001=[Detail(1, "Foo")]
        )

    def test_semicolon_inside_message(self) -> None:
        assert parse_pragma('[GO-W1000]: "a; b"; [GO-W1001]') == _pragma(
            GO_W1000=[Detail(0, "a; b")], GO_W1001=[]
        )

    def test_brackets_inside_message(self) -> None:
        got = parse_pragma('[RS-E1017]: "Calling `.hash(_)` on expression with unit-type `#[must_use]`"')
        assert got == _pragma(
            RS_E1017=[Detail(0, "Calling `.hash(_)` on expression with unit-type `#[must_use]`")]
        )

    def test_trailing_comment_terminator_ignored(self) -> None:
        assert parse_pragma('[VUE-W1002]: 20 "Vue" -->') == _pragma(VUE_W1002=[Detail(20, "Vue")])

    def test_same_code_twice_appends_in_order(self) -> None:
        assert parse_pragma("[GO-W1000]: 1; [GO-W1000]: 2") == _pragma(
            GO_W1000=[Detail(1), Detail(2)]
        )

    def test_malformed_code_is_skipped(self) -> None:
        assert parse_pragma("[issue-code]; [GO-W1000]") == _pragma(GO_W1000=[])


# ---------------------------------------------------------------------------
# parse_details()
# ---------------------------------------------------------------------------


class TestParseDetails:
    def test_stops_at_first_malformed_item(self) -> None:
        assert parse_details(' 1, "two", oops, 4') == [Detail(1), Detail(0, "two")]

    def test_nothing_parsable(self) -> None:
        assert parse_details(" -->") == []

    def test_escaped_backslash(self) -> None:
        assert parse_details(r' "a\\b"') == [Detail(0, "a\\b")]


# ---------------------------------------------------------------------------
# Detail / Pragma
# ---------------------------------------------------------------------------


class TestDetailMatches:
    def test_wildcards(self) -> None:
        assert Detail().matches(12, "anything")

    def test_column_constraint(self) -> None:
        d = Detail(column=10)
        assert d.matches(10, "x")
        assert not d.matches(11, "x")

    def test_message_constraint(self) -> None:
        d = Detail(message="Hello")
        assert d.matches(3, "Hello")
        assert not d.matches(3, "hello")

    def test_both_constraints(self) -> None:
        d = Detail(column=10, message="Hello")
        assert d.matches(10, "Hello")
        assert not d.matches(10, "World")
        assert not d.matches(9, "Hello")


class TestPragmaMerge:
    def test_shared_code_keeps_own_details_first(self) -> None:
        newer = _pragma(CXX_W2008=[Detail(49)])
        older = _pragma(CXX_W2008=[Detail(34)])
        newer.merge(older)
        assert newer.issues == {"CXX-W2008": [Detail(49), Detail(34)]}
        assert newer.hit == {"CXX-W2008": False}

    def test_codes_are_unioned(self) -> None:
        a = _pragma(GO_W1000=[])
        a.merge(_pragma(GO_W1001=[Detail(3)]))
        assert set(a.issues) == {"GO-W1000", "GO-W1001"}
        assert set(a.hit) == set(a.issues)

    def test_hit_flags_are_or_ed(self) -> None:
        a = _pragma(GO_W1000=[])
        b = _pragma(GO_W1000=[])
        b.hit["GO-W1000"] = True
        a.merge(b)
        assert a.hit == {"GO-W1000": True}

    def test_bookkeeping_ignored_by_equality(self) -> None:
        a = _pragma(GO_W1000=[])
        b = _pragma(GO_W1000=[])
        b.from_comment_line = True
        b.folded = True
        assert a == b
