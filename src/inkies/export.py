"""Export Pipeline

导出三种产物：
- SOURCE: 原始 ink 源码
- COMPILED: inklecate 编译出的 JSON
- WEB: 内联 inkjs harness 和 JSON 的独立 HTML

编译类导出每次都单独编译一次（不经过防抖，也不复用预览中的编译结果），
保证导出内容与传入文本完全一致。
"""

import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from . import config
from .compiler import FailureKind
from .coordinator import CompileCoordinator
from .render import PreviewRenderer, RenderMode
from .telemetry import format_doc_log, get_logger, metrics

logger = get_logger(__name__)


class ExportKind(Enum):
    """导出类型"""

    SOURCE = "source"
    COMPILED = "compiled"
    WEB = "web"

    @property
    def default_filename(self) -> str:
        names = {
            ExportKind.SOURCE: config.EXPORT_SOURCE_FILENAME,
            ExportKind.COMPILED: config.EXPORT_COMPILED_FILENAME,
            ExportKind.WEB: config.EXPORT_WEB_FILENAME,
        }
        return names[self]

    @property
    def extension(self) -> str:
        return Path(self.default_filename).suffix

    @property
    def media_type(self) -> str:
        types = {
            ExportKind.SOURCE: "text/plain",
            ExportKind.COMPILED: "application/json",
            ExportKind.WEB: "text/html",
        }
        return types[self]

    @property
    def needs_compile(self) -> bool:
        return self != ExportKind.SOURCE


@dataclass(frozen=True)
class ExportArtifact:
    """导出产物"""

    kind: ExportKind
    content: str
    filename: str

    @property
    def media_type(self) -> str:
        return self.kind.media_type


class ExportError(Exception):
    """导出失败

    Attributes:
        failure: 底层编译失败分类
        message: 完整的编译诊断信息
    """

    def __init__(self, failure: FailureKind, message: str):
        self.failure = failure
        self.message = message
        super().__init__(f"{config.EXPORT_ERROR_TITLE}\n{message}")


class ExportPipeline:
    """导出流水线

    组合 CompileCoordinator（一次性编译）与 PreviewRenderer（构建 HTML）。
    """

    def __init__(self, coordinator: CompileCoordinator, renderer: PreviewRenderer | None = None):
        self._coordinator = coordinator
        self._renderer = renderer or coordinator.renderer

    async def export(
        self,
        document_id: str,
        source_text: str,
        kind: ExportKind,
        title: str | None = None,
    ) -> ExportArtifact:
        """导出文档

        Args:
            document_id: 文档 ID（用于日志）
            source_text: 当前文档内容
            kind: 导出类型
            title: WEB 导出的页面标题

        Returns:
            ExportArtifact

        Raises:
            ExportError: 编译失败（找不到编译器、编译报错、输出不可读）
        """
        if kind == ExportKind.SOURCE:
            metrics.inc("export.ok", {"kind": kind.value})
            return ExportArtifact(kind=kind, content=source_text, filename=kind.default_filename)

        outcome = await self._coordinator.compile_once(source_text)
        if not outcome.ok:
            metrics.inc("export.failed", {"kind": kind.value})
            logger.info(
                format_doc_log("Export", document_id, f"{kind.value} failed: {outcome.failure.value}")
            )
            raise ExportError(outcome.failure, outcome.message)

        if kind == ExportKind.COMPILED:
            content = outcome.artifact
        else:
            # 与预览共用 COMPILED 分支的页面构建，不影响预览状态
            content = self._renderer.build(RenderMode.compiled(outcome.artifact), title=title)

        metrics.inc("export.ok", {"kind": kind.value})
        logger.info(format_doc_log("Export", document_id, f"{kind.value} ok ({len(content)} chars)"))
        return ExportArtifact(kind=kind, content=content, filename=kind.default_filename)


def save_artifact(artifact: ExportArtifact, destination: str | Path) -> Path:
    """原子写入导出产物

    destination 为目录（已存在，或以路径分隔符结尾）时使用默认文件名，
    不存在的目录会被创建。先写临时文件再 os.replace，写入失败不会留下
    不完整的文件。

    Returns:
        最终写入的路径
    """
    raw = str(destination)
    target = Path(destination)
    if raw.endswith(("/", os.sep)):
        # Path("out/") 会丢掉结尾的分隔符
        target.mkdir(parents=True, exist_ok=True)
    if target.is_dir():
        target = target / artifact.filename

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(artifact.content)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target
