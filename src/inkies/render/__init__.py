"""Preview rendering module."""

from .cache import PreviewCache
from .classifier import classify_source, needs_compile
from .console import ConsolePreview
from .renderer import PreviewRenderer, escape_js_string
from .types import PreviewState, PreviewUpdate, RenderedArtifact, RenderKind, RenderMode

__all__ = [
    "PreviewRenderer",
    "PreviewCache",
    "ConsolePreview",
    "classify_source",
    "needs_compile",
    "escape_js_string",
    "RenderKind",
    "RenderMode",
    "RenderedArtifact",
    "PreviewState",
    "PreviewUpdate",
]
