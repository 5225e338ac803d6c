"""Tests for PreviewRenderer."""

from unittest.mock import patch

import pytest

from inkies.render import PreviewRenderer, RenderKind, RenderMode, escape_js_string
from inkies.telemetry import metrics


@pytest.fixture
def renderer():
    # 空路径：不读本地 inkjs，使用 CDN 标签
    return PreviewRenderer(inkjs_path="", cdn_url="https://cdn.example/ink.js")


class TestEscapeJsString:
    def test_escapes(self):
        assert escape_js_string('say "hi"') == 'say \\"hi\\"'
        assert escape_js_string("a\\b") == "a\\\\b"
        assert escape_js_string("a\nb") == "a\\nb"
        assert escape_js_string("a\r\nb") == "a\\nb"

    def test_script_close_tag(self):
        assert "</script>" not in escape_js_string("x</script>y")

    def test_backslash_before_quote(self):
        """Backslashes are escaped first so quotes stay escaped once."""
        assert escape_js_string('\\"') == '\\\\\\"'

    def test_plain_text_unchanged(self):
        text = "Hello -> END * [choice] {x} 中文"
        assert escape_js_string(text) == text


class TestBuild:
    """Tests for PreviewRenderer.build."""

    def test_empty(self, renderer):
        html = renderer.build(RenderMode.empty())
        assert 'var storyContent = ""' in html
        assert '<script src="https://cdn.example/ink.js"></script>' in html
        assert 'id="story-json"' not in html

    def test_compiled_json_inlined_verbatim(self, renderer):
        artifact = '{"inkVersion":21,"root":[["^Hello \\"there\\"","\\n",["done"]]]}'
        html = renderer.build(RenderMode.compiled(artifact))
        assert f'<script type="application/json" id="story-json">{artifact}</script>' in html

    def test_compiled_json_script_close_escaped(self, renderer):
        html = renderer.build(RenderMode.compiled('{"root":["^</script>"]}'))
        assert '{"root":["^<\\/script>"]}' in html

    def test_compiler_error_message(self, renderer):
        message = 'ERROR: line 3: "oops"\nsecond line'
        html = renderer.build(RenderMode.compiler_error(message))
        assert 'var storyContent = "COMPILER_ERROR:ERROR: line 3: \\"oops\\"\\nsecond line"' in html

    def test_title(self, renderer):
        html = renderer.build(RenderMode.empty(), title="My <Story>")
        assert "<title>My &lt;Story&gt;</title>" in html

    def test_local_inkjs_inlined(self, tmp_path):
        script = tmp_path / "ink.min.js"
        script.write_text("var inkjs = {};")

        html = PreviewRenderer(inkjs_path=str(script)).build(RenderMode.empty())

        assert "var inkjs = {};" in html
        assert "unpkg.com" not in html


class TestRender:
    """Tests for PreviewRenderer.render."""

    def test_same_payload_is_not_rebuilt(self, renderer):
        mode = RenderMode.compiled('{"inkVersion":21}')
        first = renderer.render("doc", mode)

        with patch.object(renderer, "build") as mock_build:
            second = renderer.render("doc", RenderMode.compiled('{"inkVersion":21}'))

        mock_build.assert_not_called()
        assert second is first
        assert metrics.get_counter("render.reused") == 1

    def test_changed_payload_is_rebuilt(self, renderer):
        first = renderer.render("doc", RenderMode.compiled('{"a":1}'))
        second = renderer.render("doc", RenderMode.compiled('{"a":2}'))

        assert second is not first
        assert renderer.cache.get("doc").render_count == 2

    def test_error_after_compiled(self, renderer):
        renderer.render("doc", RenderMode.compiled("{}"))
        artifact = renderer.render("doc", RenderMode.compiler_error("bad"))

        assert artifact.mode.kind == RenderKind.COMPILER_ERROR
        assert "COMPILER_ERROR:bad" in artifact.html

    def test_pending_keeps_last_content(self, renderer):
        compiled = renderer.render("doc", RenderMode.compiled("{}"))

        pending = renderer.render("doc", RenderMode.pending())

        assert pending is compiled
        assert renderer.cache.get("doc").last_mode.kind == RenderKind.COMPILED

    def test_pending_before_any_content(self, renderer):
        artifact = renderer.render("doc", RenderMode.pending())

        assert artifact.mode.kind == RenderKind.PENDING
        assert 'var storyContent = ""' in artifact.html
        assert renderer.last_artifact("doc") is None

    def test_discard(self, renderer):
        renderer.render("doc", RenderMode.empty())
        renderer.discard("doc")
        assert renderer.last_artifact("doc") is None
