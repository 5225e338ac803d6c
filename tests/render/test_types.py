"""Tests for render data types."""

from inkies.render import PreviewUpdate, RenderedArtifact, RenderKind, RenderMode


class TestRenderMode:
    def test_payload(self):
        assert RenderMode.empty().payload == ""
        assert RenderMode.pending().payload == ""
        assert RenderMode.compiled('{"a":1}').payload == '{"a":1}'
        assert RenderMode.passthrough(" {}").payload == " {}"

    def test_error_payload_keeps_message(self):
        message = "ERROR: line 3: unexpected token\n"
        assert RenderMode.compiler_error(message).payload == "COMPILER_ERROR:" + message

    def test_equality(self):
        assert RenderMode.compiled("{}") == RenderMode(RenderKind.COMPILED, "{}")
        assert RenderMode.compiled("{}") != RenderMode.passthrough("{}")


class TestPreviewUpdate:
    def test_to_dict(self):
        mode = RenderMode.compiled("{}")
        update = PreviewUpdate(
            document_id="doc",
            generation=3,
            mode=mode,
            artifact=RenderedArtifact("doc", mode, "<html/>"),
        )

        assert update.to_dict() == {
            "type": "preview",
            "document_id": "doc",
            "generation": 3,
            "mode": "compiled",
            "html": "<html/>",
        }
