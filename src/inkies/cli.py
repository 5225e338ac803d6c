"""inkies-export: compile an .ink file and write an export artifact.

Usage:
    inkies-export story.ink --kind web -o out/
    inkies-export story.ink --kind compiled --preview
"""

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .compiler import CompilerLocator, ProcessInvoker
from .coordinator import CompileCoordinator
from .export import ExportError, ExportKind, ExportPipeline, save_artifact
from .render import ConsolePreview, PreviewRenderer, RenderMode
from .telemetry import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkies-export",
        description="Compile an ink story and export it as source, JSON or standalone HTML.",
    )
    parser.add_argument("source", type=Path, help="ink source file")
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in ExportKind],
        default=ExportKind.WEB.value,
        help="artifact to produce (default: web)",
    )
    parser.add_argument(
        "-o", "--output", default=".",
        help="output file, or directory when it exists or ends with / (default: current directory)",
    )
    parser.add_argument("--compiler", help="path to inklecate (overrides the search)")
    parser.add_argument("--preview", action="store_true", help="print a terminal summary of the compiled JSON (--kind compiled)")
    parser.add_argument("--log-level", default=None, help="logging level")
    return parser


async def run_export(args: argparse.Namespace, console: Console) -> int:
    """Run one export; returns the process exit status."""
    try:
        source_text = args.source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(Panel(Text(str(e)), title="Cannot read source", border_style="red"))
        return 1

    locator = CompilerLocator(bundled_path=args.compiler) if args.compiler else CompilerLocator()
    renderer = PreviewRenderer()
    coordinator = CompileCoordinator(renderer, ProcessInvoker(), locator)
    exporter = ExportPipeline(coordinator, renderer)
    kind = ExportKind(args.kind)

    try:
        artifact = await exporter.export(
            args.source.stem, source_text, kind, title=args.source.stem
        )
    except ExportError as e:
        ConsolePreview(console).show(RenderMode.compiler_error(e.message))
        return 1

    if args.preview and kind == ExportKind.COMPILED:
        ConsolePreview(console).show(RenderMode.compiled(artifact.content), title=args.source.name)

    try:
        target = save_artifact(artifact, args.output)
    except OSError as e:
        console.print(Panel(Text(str(e)), title="Cannot write output", border_style="red"))
        return 1

    console.print(f"[green]Wrote[/green] {target}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """入口函数"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    console = Console(stderr=True)
    status = asyncio.run(run_export(args, console))
    if argv is None:
        sys.exit(status)
    return status
