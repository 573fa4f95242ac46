"""Tests for document builders and the layout resolver."""

import pytest
from wgslfmt.doc.builders import (
    break_parent, group, hardline, if_break, indent, join, line, softline, verbatim,
)
from wgslfmt.doc.printer import resolve


def _bracketed(items):
    return group([
        "[",
        indent([softline, join([",", line], items)]),
        if_break(","),
        softline,
        "]",
    ])


class TestGroups:
    def test_group_fits_flat(self):
        assert resolve(group(["a", line, "b"])) == "a b"

    def test_group_breaks_when_too_wide(self):
        assert resolve(group(["aaaa", line, "bbbb"]), print_width=5) == "aaaa\nbbbb"

    def test_softline_is_empty_when_flat(self):
        assert resolve(group(["(", softline, "x", softline, ")"])) == "(x)"

    def test_if_break_flat_and_broken(self):
        doc = _bracketed(["1", "2"])
        assert resolve(doc) == "[1, 2]"
        assert resolve(doc, print_width=3) == "[\n  1,\n  2,\n]"

    def test_hardline_breaks_enclosing_group(self):
        assert resolve(group(["a", line, "b", hardline, "c"])) == "a\nb\nc"

    def test_break_parent_forces_break(self):
        assert resolve(group(["a", line, "b", break_parent])) == "a\nb"

    def test_should_break(self):
        assert resolve(group(["a", line, "b"], should_break=True)) == "a\nb"

    def test_inner_group_stays_flat(self):
        doc = group(["f", _bracketed(["1", "2"]), line, "tail" * 20])
        assert resolve(doc) == "f[1, 2]\n" + "tail" * 20

    def test_fit_counts_trailing_text(self):
        # The group fits on its own but not with the text that follows it.
        doc = [_bracketed(["1", "2"]), " " + "x" * 10]
        assert resolve(doc, print_width=12) == "[\n  1,\n  2,\n] " + "x" * 10


class TestIndentation:
    def test_indent_spaces(self):
        doc = ["{", indent([hardline, "x"]), hardline, "}"]
        assert resolve(doc) == "{\n  x\n}"

    def test_tab_width(self):
        doc = ["{", indent([hardline, "x"]), hardline, "}"]
        assert resolve(doc, tab_width=4) == "{\n    x\n}"

    def test_use_tabs(self):
        doc = ["{", indent(indent([hardline, "x"])), hardline, "}"]
        assert resolve(doc, use_tabs=True) == "{\n\t\tx\n}"

    def test_trailing_whitespace_trimmed(self):
        assert resolve(["a ", hardline, "b"]) == "a\nb"

    def test_empty_lines_have_no_indent(self):
        doc = ["{", indent([hardline, "a", hardline, hardline, "b"]), hardline, "}"]
        assert resolve(doc) == "{\n  a\n\n  b\n}"


class TestVerbatim:
    def test_verbatim_keeps_own_indentation(self):
        doc = ["{", indent([hardline, verbatim("a\n      b")]), hardline, "}"]
        assert resolve(doc) == "{\n  a\n      b\n}"

    def test_verbatim_single_line(self):
        assert verbatim("abc") == ["abc"]


class TestJoin:
    def test_join(self):
        assert join(", ", ["a", "b", "c"]) == ["a", ", ", "b", ", ", "c"]

    def test_join_empty(self):
        assert join(", ", []) == []


def test_unknown_fragment_rejected():
    with pytest.raises(TypeError):
        resolve([object()])
