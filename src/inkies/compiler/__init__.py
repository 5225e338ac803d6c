"""inklecate compiler integration"""

from .invoker import ProcessInvoker
from .locator import CompilerLocator, get_locator
from .types import CompileOutcome, CompileRequest, FailureKind

__all__ = [
    "CompilerLocator",
    "get_locator",
    "ProcessInvoker",
    "CompileOutcome",
    "CompileRequest",
    "FailureKind",
]
