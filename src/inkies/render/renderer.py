"""RenderMode → 可展示 HTML 的渲染器

将预览模式包装进 inkjs harness 模板，得到可直接加载的完整页面。
内容未变化时复用上一次的结果，避免重复构建。
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from inkies import config
from inkies.telemetry import format_doc_log, get_logger, metrics

from .cache import PreviewCache
from .types import RenderedArtifact, RenderKind, RenderMode

logger = get_logger(__name__)


def escape_js_string(text: str) -> str:
    """转义后嵌入 JS 双引号字符串

    转义反斜杠、双引号、换行；丢弃 \\r；</ 写成 <\\/ 以免提前闭合 <script>。
    除此之外内容原样保留。
    """
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "")
        .replace("</", "<\\/")
    )


def _load_ink_script(inkjs_path: str | None, cdn_url: str) -> str:
    """生成 inkjs 的 <script> 标签：本地文件内联，否则走 CDN"""
    if inkjs_path:
        path = Path(inkjs_path)
        if path.is_file():
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"[Renderer] Failed to read {path}: {e}")
            else:
                content = content.replace("</script", "<\\/script")
                return f"<script>/* inkjs ({len(content)} bytes) */\n{content}</script>"
    logger.debug(f"[Renderer] Local inkjs not found, using CDN: {cdn_url}")
    return f'<script src="{cdn_url}"></script>'


class PreviewRenderer:
    """预览渲染器

    - render(): 带去重的渲染入口，维护 PreviewState
    - build(): 无状态的页面构建（导出也复用）

    inkjs 运行时只在构造时读取一次，render/build 本身不访问磁盘和网络。
    """

    def __init__(
        self,
        inkjs_path: str | None = None,
        cdn_url: str | None = None,
        templates_dir: Path | None = None,
        cache: PreviewCache | None = None,
    ):
        """初始化渲染器

        Args:
            inkjs_path: 本地 ink.min.js 路径，None 使用配置
            cdn_url: 本地文件不可用时的 CDN 地址
            templates_dir: harness 模板目录
            cache: 预览状态缓存
        """
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir or config.TEMPLATES_DIR)),
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._template = self._env.get_template(config.PREVIEW_TEMPLATE)
        self._ink_script = _load_ink_script(
            inkjs_path if inkjs_path is not None else config.INKJS_PATH,
            cdn_url or config.INKJS_CDN_URL,
        )
        self._cache = cache or PreviewCache()

    @property
    def cache(self) -> PreviewCache:
        return self._cache

    def render(self, document_id: str, mode: RenderMode) -> RenderedArtifact:
        """渲染预览

        payload 与上次相同时直接返回上次的产物；PENDING 保留上次内容。

        Args:
            document_id: 文档 ID
            mode: 预览模式

        Returns:
            RenderedArtifact
        """
        if mode.kind == RenderKind.PENDING:
            last = self._cache.last_artifact(document_id)
            if last is not None:
                return last
            # 还没有任何内容时显示占位页，不记录状态
            return RenderedArtifact(document_id, mode, self.build(RenderMode.empty()))

        content = mode.payload
        if self._cache.is_unchanged(document_id, content):
            metrics.inc("render.reused")
            return self._cache.last_artifact(document_id)

        artifact = RenderedArtifact(document_id=document_id, mode=mode, html=self.build(mode))
        self._cache.mark_rendered(document_id, content, mode, artifact)
        metrics.inc("render.built", {"mode": mode.kind.value})
        logger.debug(
            format_doc_log("Renderer", document_id, f"built {mode.kind.value} ({len(artifact.html)} chars)")
        )
        return artifact

    def build(self, mode: RenderMode, title: str | None = None) -> str:
        """构建完整的 harness 页面

        编译产物放进 <script type="application/json">，其余 payload
        转义后作为 JS 字符串嵌入。

        Args:
            mode: 预览模式
            title: 页面标题

        Returns:
            HTML 字符串
        """
        story_json = None
        story_content = ""
        if mode.kind in (RenderKind.COMPILED, RenderKind.PASSTHROUGH_RAW):
            # JSON 原样内联到 application/json 块中
            story_json = mode.text.replace("</", "<\\/")
        else:
            story_content = escape_js_string(mode.payload)

        return self._template.render(
            title=title or config.PREVIEW_TITLE,
            ink_script=self._ink_script,
            story_json=story_json,
            story_content=story_content,
            error_prefix=config.COMPILER_ERROR_PREFIX,
        )

    def last_artifact(self, document_id: str) -> RenderedArtifact | None:
        """文档最近一次渲染结果"""
        return self._cache.last_artifact(document_id)

    def discard(self, document_id: str) -> None:
        """丢弃文档预览状态（视图关闭）"""
        self._cache.remove(document_id)
