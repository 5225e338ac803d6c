"""Compile Coordinator

Turns a stream of edits into the minimal sequence of compiler runs and
delivers only the freshest result to the preview.

Data flow:
    on_text_changed() → classify → debounce → compile (single-flight) → render → notify()
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from . import config
from .compiler import CompileOutcome, CompilerLocator, CompileRequest, FailureKind, ProcessInvoker
from .render import PreviewRenderer, PreviewUpdate, RenderMode, classify_source
from .telemetry import format_doc_log, get_logger, metrics, preview_text

logger = get_logger(__name__)

# Callback type for preview updates
PreviewUpdateCallback = Callable[[PreviewUpdate], Awaitable[None]]


@dataclass
class DocumentSlot:
    """Per-document compile state.

    Attributes:
        generation: Latest generation issued for the document
        pending_timer: Task still inside its debounce wait, if any
        lock: Held while a compiler process runs (single-flight)
        tasks: Every outstanding task of the document
        last_update: Last update delivered to subscribers
    """

    document_id: str
    generation: int = 0
    pending_timer: asyncio.Task | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    tasks: set[asyncio.Task] = field(default_factory=set)
    last_update: PreviewUpdate | None = None


class CompileCoordinator:
    """Compile Coordinator

    Per document:
    - Every edit bumps the generation; results of older generations are dropped
    - Empty input and already-compiled JSON are shown without compiling
    - Other input waits for a quiet period; a newer edit abandons the wait
    - At most one compiler process runs at a time; a superseded process is
      left to finish and its result discarded

    Staleness is checked at every suspension point: after the debounce wait,
    after acquiring the compile lock, after the process exits, and before
    each subscriber is notified.
    """

    def __init__(
        self,
        renderer: PreviewRenderer,
        invoker: ProcessInvoker | None = None,
        locator: CompilerLocator | None = None,
        debounce_seconds: float | None = None,
    ):
        """Initialize the coordinator.

        Args:
            renderer: Preview renderer receiving every delivered mode
            invoker: Compiler process invoker
            locator: Compiler locator
            debounce_seconds: Quiet period before compiling (default from config)
        """
        self._renderer = renderer
        self._invoker = invoker or ProcessInvoker()
        self._locator = locator or CompilerLocator()
        self._debounce_seconds = (
            config.DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self._slots: dict[str, DocumentSlot] = {}
        self._callbacks: list[PreviewUpdateCallback] = []

    @property
    def renderer(self) -> PreviewRenderer:
        return self._renderer

    @property
    def debounce_seconds(self) -> float:
        return self._debounce_seconds

    def on_update(self, callback: PreviewUpdateCallback) -> None:
        """Register a callback for preview updates.

        Args:
            callback: Async function called with PreviewUpdate
        """
        self._callbacks.append(callback)

    # === Entry point ===

    async def on_text_changed(self, document_id: str, text: str) -> int:
        """Handle an edit.

        Returns as soon as the edit is classified; compiling happens in a
        background task.

        Args:
            document_id: Edited document
            text: Full document content after the edit

        Returns:
            Generation assigned to this edit
        """
        slot = self._get_or_create_slot(document_id)
        slot.generation += 1
        request = CompileRequest(document_id=document_id, source_text=text, generation=slot.generation)
        self._cancel_pending_timer(slot)

        mode = classify_source(text)
        if mode is not None:
            logger.debug(
                format_doc_log("Coordinator", document_id, f"g{request.generation} fast path: {mode.kind.value}")
            )
            await self._deliver(slot, request.generation, mode)
            return request.generation

        logger.debug(
            format_doc_log(
                "Coordinator", document_id, f"g{request.generation} scheduled: {preview_text(text)}"
            )
        )
        # 先登记任务再投递 Pending，投递期间的新编辑可以取消它
        task = asyncio.create_task(self._debounced_compile(slot, request))
        slot.pending_timer = task
        slot.tasks.add(task)
        task.add_done_callback(slot.tasks.discard)

        await self._deliver(slot, request.generation, RenderMode.pending())
        return request.generation

    async def compile_once(self, source_text: str) -> CompileOutcome:
        """Run one compile immediately, outside debounce and generations.

        Used by exports, which must reflect the given text exactly.
        """
        executable = self._locator.locate()
        return await self._invoker.invoke(executable, source_text)

    # === State queries ===

    def latest_generation(self, document_id: str) -> int:
        """Latest generation issued for a document (0 if never edited)."""
        slot = self._slots.get(document_id)
        return slot.generation if slot else 0

    def is_latest(self, document_id: str, generation: int) -> bool:
        """Whether ``generation`` is still the newest for the document."""
        slot = self._slots.get(document_id)
        return slot is not None and slot.generation == generation

    def last_update(self, document_id: str) -> PreviewUpdate | None:
        """Last update delivered for a document."""
        slot = self._slots.get(document_id)
        return slot.last_update if slot else None

    def is_compiling(self, document_id: str) -> bool:
        """Whether a compiler process is running for the document."""
        slot = self._slots.get(document_id)
        return slot is not None and slot.lock.locked()

    def get_document_ids(self) -> set[str]:
        return set(self._slots.keys())

    # === Lifecycle ===

    async def wait_idle(self, document_id: str) -> None:
        """Wait until the document has no outstanding task."""
        slot = self._slots.get(document_id)
        while slot is not None:
            pending = [task for task in slot.tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close_document(self, document_id: str) -> None:
        """Forget a document: cancel its tasks and discard its preview state."""
        slot = self._slots.pop(document_id, None)
        self._renderer.discard(document_id)
        metrics.gauge("coordinator.documents", len(self._slots))
        if slot is None:
            return

        tasks = list(slot.tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug(format_doc_log("Coordinator", document_id, f"closed ({len(tasks)} tasks cancelled)"))

    async def shutdown(self) -> None:
        """Close every document."""
        for document_id in list(self._slots.keys()):
            await self.close_document(document_id)
        logger.info("[Coordinator] Stopped")

    # === Internals ===

    def _get_or_create_slot(self, document_id: str) -> DocumentSlot:
        slot = self._slots.get(document_id)
        if slot is None:
            slot = DocumentSlot(document_id=document_id)
            self._slots[document_id] = slot
            metrics.gauge("coordinator.documents", len(self._slots))
        return slot

    def _is_current(self, slot: DocumentSlot, generation: int) -> bool:
        # 文档关闭后 slot 被移除，旧 slot 上的结果一律视为过期
        return self._slots.get(slot.document_id) is slot and slot.generation == generation

    def _cancel_pending_timer(self, slot: DocumentSlot) -> None:
        """Abandon a request still waiting out its debounce period."""
        timer = slot.pending_timer
        slot.pending_timer = None
        if timer is not None and not timer.done():
            timer.cancel()
            metrics.inc("debounce.abandoned")

    async def _debounced_compile(self, slot: DocumentSlot, request: CompileRequest) -> None:
        document_id = request.document_id
        generation = request.generation

        try:
            await asyncio.sleep(self._debounce_seconds)
        except asyncio.CancelledError:
            # 被新的编辑取消，正常行为
            logger.debug(format_doc_log("Coordinator", document_id, f"g{generation} abandoned"))
            return

        if slot.pending_timer is asyncio.current_task():
            slot.pending_timer = None
        if not self._is_current(slot, generation):
            return

        async with slot.lock:
            # 等锁期间可能又有新编辑
            if not self._is_current(slot, generation):
                logger.debug(format_doc_log("Coordinator", document_id, f"g{generation} superseded before spawn"))
                return
            try:
                outcome = await self.compile_once(request.source_text)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(format_doc_log("Coordinator", document_id, f"compile crashed: {e}"))
                outcome = CompileOutcome.failed(FailureKind.PROCESS_ERROR, str(e))

        if not self._is_current(slot, generation):
            metrics.inc("compile.stale_dropped")
            logger.debug(
                format_doc_log(
                    "Coordinator", document_id, f"g{generation} result dropped (latest g{slot.generation})"
                )
            )
            return

        if outcome.ok:
            mode = RenderMode.compiled(outcome.artifact)
        else:
            logger.info(
                format_doc_log("Coordinator", document_id, f"g{generation} {outcome.failure.value}")
            )
            mode = RenderMode.compiler_error(outcome.message)

        await self._deliver(slot, generation, mode)

    async def _deliver(self, slot: DocumentSlot, generation: int, mode: RenderMode) -> PreviewUpdate | None:
        """Render ``mode`` and notify subscribers, unless it became stale."""
        if not self._is_current(slot, generation):
            metrics.inc("compile.stale_dropped")
            return None

        artifact = self._renderer.render(slot.document_id, mode)
        update = PreviewUpdate(
            document_id=slot.document_id,
            generation=generation,
            mode=mode,
            artifact=artifact,
        )
        slot.last_update = update
        await self._notify(slot, update)
        return update

    async def _notify(self, slot: DocumentSlot, update: PreviewUpdate) -> None:
        """Notify all registered callbacks.

        Stops early if a newer generation was delivered meanwhile, so a
        subscriber never receives an older update after a newer one.
        """
        for callback in list(self._callbacks):
            if not self._is_current(slot, update.generation):
                break
            try:
                await callback(update)
            except Exception as e:
                metrics.inc("callback.errors")
                logger.error(f"[Coordinator] Callback error: {e}")
