"""输入分类器

判断原始输入是否需要编译：
- 空白输入 → EMPTY
- 已是编译产物（以 { 开头）→ PASSTHROUGH_RAW
- 其他 → 需要编译（返回 None）
"""

from inkies import config

from .types import RenderMode

COMPILED_MARKER = config.COMPILED_MARKER


def classify_source(text: str) -> RenderMode | None:
    """快速分类，无需启动编译进程

    Args:
        text: 文档当前内容

    Returns:
        可直接展示的 RenderMode；None 表示需要编译
    """
    trimmed = text.strip()
    if not trimmed:
        return RenderMode.empty()
    if trimmed.startswith(COMPILED_MARKER):
        return RenderMode.passthrough(text)
    return None


def needs_compile(text: str) -> bool:
    """是否需要调用编译器"""
    return classify_source(text) is None
