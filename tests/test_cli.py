"""Tests for the inkies-export command."""

from unittest.mock import AsyncMock, patch

import pytest

from inkies.cli import build_parser, main
from inkies.compiler import CompileOutcome, FailureKind

COMPILED = '{"inkVersion":21,"root":[]}'


@pytest.fixture
def story(tmp_path):
    path = tmp_path / "tale.ink"
    path.write_text("Hello, world.\n", encoding="utf-8")
    return path


def patch_compile(outcome):
    return patch(
        "inkies.coordinator.CompileCoordinator.compile_once",
        new_callable=AsyncMock,
        return_value=outcome,
    )


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["story.ink"])
        assert args.kind == "web"
        assert str(args.output) == "."
        assert not args.preview

    def test_rejects_unknown_kind(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["story.ink", "--kind", "pdf"])


class TestMain:
    def test_export_compiled(self, story, tmp_path):
        out = tmp_path / "out"
        out.mkdir()

        with patch_compile(CompileOutcome.success(COMPILED)) as mock_compile:
            status = main([str(story), "--kind", "compiled", "-o", str(out)])

        assert status == 0
        assert (out / "story.json").read_text(encoding="utf-8") == COMPILED
        mock_compile.assert_awaited_once_with("Hello, world.\n")

    def test_output_directory_created(self, story, tmp_path):
        out = tmp_path / "build"

        with patch_compile(CompileOutcome.success(COMPILED)):
            status = main([str(story), "-o", f"{out}/"])

        assert status == 0
        assert COMPILED in (out / "index.html").read_text(encoding="utf-8")

    def test_export_web(self, story, tmp_path):
        target = tmp_path / "play.html"

        with patch_compile(CompileOutcome.success(COMPILED)):
            status = main([str(story), "-o", str(target)])

        assert status == 0
        html = target.read_text(encoding="utf-8")
        assert COMPILED in html
        assert "<title>tale</title>" in html

    def test_export_source_without_compiler(self, story, tmp_path):
        with patch_compile(CompileOutcome.failed(FailureKind.TOOL_MISSING, "missing")) as mock_compile:
            status = main([str(story), "--kind", "source", "-o", str(tmp_path)])

        assert status == 0
        assert (tmp_path / "Story.ink").read_text(encoding="utf-8") == "Hello, world.\n"
        mock_compile.assert_not_awaited()

    def test_compile_error_writes_nothing(self, story, tmp_path, capsys):
        out = tmp_path / "out"
        out.mkdir()
        failure = CompileOutcome.failed(FailureKind.PROCESS_ERROR, "Line 1: unexpected token")

        with patch_compile(failure):
            status = main([str(story), "--kind", "compiled", "-o", str(out)])

        assert status == 1
        assert list(out.iterdir()) == []
        assert "Line 1: unexpected token" in capsys.readouterr().err

    def test_missing_source(self, tmp_path, capsys):
        status = main([str(tmp_path / "nope.ink"), "-o", str(tmp_path)])

        assert status == 1
        assert "Cannot read source" in capsys.readouterr().err

    def test_preview_summary(self, story, tmp_path, capsys):
        with patch_compile(CompileOutcome.success(COMPILED)):
            status = main([str(story), "--kind", "compiled", "--preview", "-o", str(tmp_path)])

        assert status == 0
        assert "inkVersion 21" in capsys.readouterr().err
