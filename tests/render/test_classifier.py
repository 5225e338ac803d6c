"""Tests for the source classifier."""

from inkies.render import RenderKind, classify_source, needs_compile


class TestClassifySource:
    """Tests for classify_source."""

    def test_empty(self):
        assert classify_source("").kind == RenderKind.EMPTY

    def test_whitespace_only(self):
        assert classify_source("  \n\t \r\n").kind == RenderKind.EMPTY

    def test_compiled_json_passthrough(self):
        """Leading whitespace is ignored; original text is kept."""
        text = '\n  {"inkVersion":21,"root":[]}'
        mode = classify_source(text)
        assert mode.kind == RenderKind.PASSTHROUGH_RAW
        assert mode.text == text

    def test_ink_source_needs_compile(self):
        assert classify_source("Hello, world.") is None
        assert classify_source("=== start ===\n* [Go] -> END") is None

    def test_brace_later_in_text(self):
        """Only the first non-whitespace character decides."""
        assert classify_source("VAR x = 1\n{x}") is None


class TestNeedsCompile:
    def test_needs_compile(self):
        assert needs_compile("Hello")
        assert not needs_compile("")
        assert not needs_compile("{}")
