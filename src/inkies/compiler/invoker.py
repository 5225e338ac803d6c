"""Run inklecate out-of-process against a source snapshot."""

import asyncio
import tempfile
from pathlib import Path

from .. import config
from ..telemetry import get_logger, metrics
from .types import CompileOutcome, FailureKind

logger = get_logger(__name__)

TOOL_MISSING_MESSAGE = (
    "inklecate compiler not found. Please install it or set INKIES_INKLECATE."
)
OUTPUT_UNREADABLE_MESSAGE = "Compiler finished but JSON output unreadable."
UNKNOWN_ERROR_MESSAGE = "Unknown compiler error"


class ProcessInvoker:
    """Invoke the external compiler, one process per call.

    Contract of the executable: ``<exe> -o <outputPath> <inputPath>``.
    Combined stdout/stderr is captured; on a non-zero exit it becomes the
    user-facing error message verbatim.

    Every call uses its own temporary directory, so concurrent calls for
    different documents never share paths.
    """

    def __init__(self, timeout: float | None = None):
        """Initialize ProcessInvoker.

        Args:
            timeout: Seconds before the compiler is killed. ``None`` uses
                config; ``0`` disables the timeout.
        """
        self._timeout = config.COMPILE_TIMEOUT_SECONDS if timeout is None else timeout

    async def invoke(self, executable: str | None, source_text: str) -> CompileOutcome:
        """Compile ``source_text`` with ``executable``.

        Cancelling the awaiting task kills the child process and re-raises
        ``CancelledError``; no outcome is produced in that case.

        Args:
            executable: Compiler path from CompilerLocator, or None.
            source_text: Snapshot of the document source.

        Returns:
            CompileOutcome with the compiled JSON or a typed failure.
        """
        if executable is None:
            return CompileOutcome.failed(FailureKind.TOOL_MISSING, TOOL_MISSING_MESSAGE)

        metrics.inc("compile.started")
        with tempfile.TemporaryDirectory(prefix=config.TEMP_DIR_PREFIX) as workdir:
            input_path = Path(workdir) / config.TEMP_SOURCE_NAME
            output_path = Path(workdir) / config.TEMP_OUTPUT_NAME

            try:
                input_path.write_text(source_text, encoding="utf-8")
            except OSError as e:
                return CompileOutcome.failed(
                    FailureKind.IO_ERROR, f"Failed to write temp file: {e}"
                )

            outcome = await self._run(executable, input_path, output_path)

        if outcome.ok:
            metrics.inc("compile.succeeded")
        else:
            metrics.inc("compile.failed", {"kind": outcome.failure.value})
        return outcome

    async def _run(self, executable: str, input_path: Path, output_path: Path) -> CompileOutcome:
        cmd = [executable, "-o", str(output_path), str(input_path)]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            # 无法启动视同编译失败
            logger.warning(f"[Invoker] Failed to spawn {executable}: {e}")
            return CompileOutcome.failed(FailureKind.PROCESS_ERROR, str(e))

        try:
            if self._timeout:
                stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
            else:
                stdout, _ = await proc.communicate()
        except asyncio.TimeoutError:
            await self._kill(proc)
            logger.warning(f"[Invoker] Compiler timed out after {self._timeout}s")
            return CompileOutcome.failed(
                FailureKind.PROCESS_ERROR,
                f"{config.COMPILER_NAME} timed out after {self._timeout:g}s",
            )
        except asyncio.CancelledError:
            await self._kill(proc)
            logger.debug("[Invoker] Compile cancelled, process killed")
            raise

        output = (stdout or b"").decode("utf-8", errors="replace")

        if proc.returncode != 0:
            logger.info(f"[Invoker] Compiler exited with {proc.returncode}")
            return CompileOutcome.failed(
                FailureKind.PROCESS_ERROR, output or UNKNOWN_ERROR_MESSAGE
            )

        try:
            # inklecate 输出带 BOM
            artifact = output_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"[Invoker] Output unreadable: {e}")
            return CompileOutcome.failed(FailureKind.IO_ERROR, OUTPUT_UNREADABLE_MESSAGE)

        if not artifact.strip():
            logger.warning("[Invoker] Compiler exited 0 but wrote an empty output file")
            return CompileOutcome.failed(FailureKind.IO_ERROR, OUTPUT_UNREADABLE_MESSAGE)

        return CompileOutcome.success(artifact)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        try:
            proc.kill()
        except ProcessLookupError:
            return
        await proc.wait()
