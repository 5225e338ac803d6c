"""Terminal preview surface using Rich library."""

import json

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .types import RenderKind, RenderMode


class ConsolePreview:
    """Print a RenderMode to the terminal.

    Terminal counterpart of the HTML harness: it does not run the story,
    it shows the placeholder, the compiler error panel, or a short summary
    of the compiled artifact.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def show(self, mode: RenderMode, title: str = "") -> None:
        """Render ``mode`` to the console."""
        self.console.print(self.to_renderable(mode, title))

    def to_renderable(self, mode: RenderMode, title: str = ""):
        """Build the Rich renderable for ``mode``."""
        if mode.kind == RenderKind.EMPTY:
            return Text("Start writing...", style="italic dim")

        if mode.kind == RenderKind.PENDING:
            return Text("Compiling...", style="dim")

        if mode.kind == RenderKind.COMPILER_ERROR:
            # markup 关闭：诊断信息原样输出
            return Panel(
                Text(mode.text),
                title="Compilation Failed",
                title_align="left",
                border_style="red",
            )

        return Panel(
            Text(self._summarize(mode.text)),
            title=title or "Compiled",
            title_align="left",
            border_style="green",
        )

    @staticmethod
    def _summarize(artifact: str) -> str:
        """Summarize compiled JSON: ink version and top-level keys."""
        try:
            data = json.loads(artifact)
        except ValueError:
            return f"{len(artifact)} chars (not valid JSON)"
        if not isinstance(data, dict):
            return f"{len(artifact)} chars"

        version = data.get("inkVersion", "?")
        keys = ", ".join(sorted(data.keys()))
        return f"inkVersion {version}, {len(artifact)} chars\nkeys: {keys}"
