"""Locate the inklecate compiler executable."""

import os
from pathlib import Path

from .. import config
from ..telemetry import get_logger

logger = get_logger(__name__)


class CompilerLocator:
    """Resolve the path to inklecate.

    Search order, first match wins:
    1. The compiler bundled with the application (or ``INKIES_INKLECATE``)
    2. ``config.COMPILER_SEARCH_PATHS`` in order

    A hit is cached for the lifetime of the locator. A miss is not cached,
    so a compiler installed while the editor is open is found on the next
    compile. ``None`` means "not installed" and is a normal result.
    """

    def __init__(
        self,
        bundled_path: str | None = None,
        search_paths: list[str] | None = None,
    ):
        """Initialize CompilerLocator.

        Args:
            bundled_path: Path of the bundled compiler. Defaults to config.
            search_paths: Well-known install locations. Defaults to config.
        """
        self._bundled_path = (
            bundled_path if bundled_path is not None else config.BUNDLED_COMPILER_PATH
        )
        self._search_paths = (
            list(search_paths) if search_paths is not None else list(config.COMPILER_SEARCH_PATHS)
        )
        self._cached: str | None = None

    @property
    def candidates(self) -> list[str]:
        """All candidate paths in search order."""
        return [self._bundled_path, *self._search_paths]

    def locate(self) -> str | None:
        """Return the compiler path, or None if no candidate is usable."""
        if self._cached is not None:
            return self._cached

        for candidate in self.candidates:
            if self._is_executable(candidate):
                logger.info(f"[Locator] Using compiler: {candidate}")
                self._cached = candidate
                return candidate

        logger.debug(f"[Locator] No compiler among {self.candidates}")
        return None

    def invalidate(self) -> None:
        """Forget the cached hit (e.g. after the user moved the compiler)."""
        self._cached = None

    @staticmethod
    def _is_executable(path: str) -> bool:
        if not path:
            return False
        candidate = Path(path)
        return candidate.is_file() and os.access(candidate, os.X_OK)


_default_locator: CompilerLocator | None = None


def get_locator() -> CompilerLocator:
    """Process-wide locator instance."""
    global _default_locator
    if _default_locator is None:
        _default_locator = CompilerLocator()
    return _default_locator
