"""Bootstrap - 集中构造系统组件

职责：
- 创建 CompilerLocator, ProcessInvoker, PreviewRenderer
- 创建 CompileCoordinator 和 ExportPipeline
- 返回 RuntimeComponents 供调用方使用

不负责：
- WebServer 创建和 uvicorn 生命周期（由 web.app 管理）
"""

from dataclasses import dataclass

from ..compiler import CompilerLocator, ProcessInvoker, get_locator
from ..coordinator import CompileCoordinator
from ..documents import InMemoryDocuments
from ..export import ExportPipeline
from ..render import PreviewRenderer
from ..telemetry import get_logger

logger = get_logger(__name__)

# 防止重复构造
_current_components: "RuntimeComponents | None" = None


@dataclass
class RuntimeComponents:
    """Bootstrap 返回的运行时组件集合"""

    locator: CompilerLocator
    invoker: ProcessInvoker
    renderer: PreviewRenderer
    coordinator: CompileCoordinator
    exporter: ExportPipeline
    documents: InMemoryDocuments

    async def stop(self) -> None:
        """关闭所有文档的编译任务"""
        await self.coordinator.shutdown()
        logger.info("[Bootstrap] Components stopped")


def bootstrap(
    locator: CompilerLocator | None = None,
    invoker: ProcessInvoker | None = None,
    renderer: PreviewRenderer | None = None,
    debounce_seconds: float | None = None,
) -> RuntimeComponents:
    """构造运行时组件

    Args:
        locator: 编译器定位器，None 使用进程级实例
        invoker: 编译进程调用器
        renderer: 预览渲染器
        debounce_seconds: 防抖时间，None 使用配置

    Returns:
        RuntimeComponents

    Raises:
        RuntimeError: 如果已经调用过 bootstrap
    """
    global _current_components

    if _current_components is not None:
        raise RuntimeError(
            "bootstrap() has already been called. "
            "Use get_current_components() to access existing components."
        )

    locator = locator or get_locator()
    invoker = invoker or ProcessInvoker()
    renderer = renderer or PreviewRenderer()

    coordinator = CompileCoordinator(
        renderer=renderer,
        invoker=invoker,
        locator=locator,
        debounce_seconds=debounce_seconds,
    )
    exporter = ExportPipeline(coordinator, renderer)

    compiler_path = locator.locate()
    if compiler_path is None:
        logger.warning("[Bootstrap] inklecate not found, previews will show a compiler error")
    logger.info("[Bootstrap] Components created")

    _current_components = RuntimeComponents(
        locator=locator,
        invoker=invoker,
        renderer=renderer,
        coordinator=coordinator,
        exporter=exporter,
        documents=InMemoryDocuments(),
    )
    return _current_components


def get_current_components() -> "RuntimeComponents | None":
    """获取当前 RuntimeComponents，bootstrap() 之前返回 None"""
    return _current_components


def _reset_for_testing() -> None:
    """重置 bootstrap 状态（仅用于测试）"""
    global _current_components
    _current_components = None
