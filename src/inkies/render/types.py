"""Preview 数据类型

预览链路各模块之间通信使用的数据类型。
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from inkies import config


class RenderKind(Enum):
    """预览需要展示的内容类型"""

    EMPTY = "empty"
    PASSTHROUGH_RAW = "passthrough_raw"  # 输入本身已是编译产物
    COMPILED = "compiled"
    COMPILER_ERROR = "compiler_error"
    PENDING = "pending"  # 编译进行中，保留上一次内容


@dataclass(frozen=True)
class RenderMode:
    """预览模式

    text 的含义随 kind 变化：
    - PASSTHROUGH_RAW: 原始输入
    - COMPILED: 编译产物
    - COMPILER_ERROR: 完整的编译诊断信息
    - EMPTY / PENDING: 空
    """

    kind: RenderKind
    text: str = ""

    @classmethod
    def empty(cls) -> "RenderMode":
        return cls(RenderKind.EMPTY)

    @classmethod
    def passthrough(cls, text: str) -> "RenderMode":
        return cls(RenderKind.PASSTHROUGH_RAW, text)

    @classmethod
    def compiled(cls, artifact: str) -> "RenderMode":
        return cls(RenderKind.COMPILED, artifact)

    @classmethod
    def compiler_error(cls, message: str) -> "RenderMode":
        return cls(RenderKind.COMPILER_ERROR, message)

    @classmethod
    def pending(cls) -> "RenderMode":
        return cls(RenderKind.PENDING)

    @property
    def payload(self) -> str:
        """harness 能识别的文本形态：空 / JSON / COMPILER_ERROR: 前缀"""
        if self.kind == RenderKind.COMPILER_ERROR:
            return f"{config.COMPILER_ERROR_PREFIX}{self.text}"
        if self.kind in (RenderKind.EMPTY, RenderKind.PENDING):
            return ""
        return self.text


@dataclass
class RenderedArtifact:
    """渲染结果：可直接加载的完整 HTML"""

    document_id: str
    mode: RenderMode
    html: str
    built_at: datetime = field(default_factory=datetime.now)


@dataclass
class PreviewState:
    """文档预览状态

    仅用于跳过内容未变化时的重复渲染。
    """

    document_id: str
    last_rendered_content: str | None = None
    last_mode: RenderMode | None = None
    last_artifact: RenderedArtifact | None = None
    render_count: int = 0


@dataclass
class PreviewUpdate:
    """预览更新通知

    CompileCoordinator 每次向预览面投递结果时广播给订阅者。
    """

    document_id: str
    generation: int
    mode: RenderMode
    artifact: RenderedArtifact

    def to_dict(self) -> dict:
        """WebSocket 广播格式"""
        return {
            "type": "preview",
            "document_id": self.document_id,
            "generation": self.generation,
            "mode": self.mode.kind.value,
            "html": self.artifact.html,
        }
