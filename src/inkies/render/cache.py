"""预览状态缓存

按 document_id 维护 PreviewState，文档视图关闭时丢弃。
"""

from .types import PreviewState, RenderedArtifact, RenderMode


class PreviewCache:
    """预览状态缓存

    维护：
    - 每个文档上次渲染的内容（payload）
    - 上次的 RenderMode 和渲染产物
    """

    def __init__(self):
        self.states: dict[str, PreviewState] = {}

    def get_or_create(self, document_id: str) -> PreviewState:
        """获取或创建文档预览状态"""
        state = self.states.get(document_id)
        if state is None:
            state = PreviewState(document_id=document_id)
            self.states[document_id] = state
        return state

    def get(self, document_id: str) -> PreviewState | None:
        return self.states.get(document_id)

    def is_unchanged(self, document_id: str, content: str) -> bool:
        """内容是否与上次渲染相同"""
        state = self.states.get(document_id)
        return (
            state is not None
            and state.last_artifact is not None
            and state.last_rendered_content == content
        )

    def mark_rendered(
        self, document_id: str, content: str, mode: RenderMode, artifact: RenderedArtifact
    ) -> None:
        """记录本次渲染"""
        state = self.get_or_create(document_id)
        state.last_rendered_content = content
        state.last_mode = mode
        state.last_artifact = artifact
        state.render_count += 1

    def last_artifact(self, document_id: str) -> RenderedArtifact | None:
        state = self.states.get(document_id)
        return state.last_artifact if state else None

    def remove(self, document_id: str) -> None:
        """移除文档状态（视图关闭）"""
        self.states.pop(document_id, None)

    def document_ids(self) -> set[str]:
        return set(self.states.keys())
