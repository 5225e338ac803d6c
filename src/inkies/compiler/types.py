"""编译数据类型

- FailureKind: 编译失败分类
- CompileRequest: 一次编译请求（按文档 generation 区分新旧）
- CompileOutcome: 编译结果（成功产物或失败信息）
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FailureKind(Enum):
    """编译失败分类

    - TOOL_MISSING: 找不到 inklecate
    - PROCESS_ERROR: inklecate 运行后非 0 退出（或无法启动、超时）
    - IO_ERROR: 临时文件写入失败，或编译成功但输出不可读
    """

    TOOL_MISSING = "tool_missing"
    PROCESS_ERROR = "process_error"
    IO_ERROR = "io_error"

    @property
    def title(self) -> str:
        """面向用户的简短标题"""
        titles = {
            FailureKind.TOOL_MISSING: "Compiler not found",
            FailureKind.PROCESS_ERROR: "Compilation failed",
            FailureKind.IO_ERROR: "Compiler output unreadable",
        }
        return titles[self]


@dataclass(frozen=True)
class CompileRequest:
    """编译请求

    generation 是同一文档内单调递增的序号，用于判断结果是否过期。
    """

    document_id: str
    source_text: str
    generation: int
    created_at: datetime = field(default_factory=datetime.now, compare=False)


@dataclass(frozen=True)
class CompileOutcome:
    """编译结果

    成功时 artifact 为编译产物（JSON 文本）；失败时 failure 标明分类，
    message 为面向用户的完整诊断信息（不截断、不改写）。
    """

    artifact: str | None = None
    failure: FailureKind | None = None
    message: str = ""

    @classmethod
    def success(cls, artifact: str) -> "CompileOutcome":
        return cls(artifact=artifact)

    @classmethod
    def failed(cls, kind: FailureKind, message: str) -> "CompileOutcome":
        return cls(failure=kind, message=message)

    @property
    def ok(self) -> bool:
        """是否编译成功"""
        return self.failure is None
