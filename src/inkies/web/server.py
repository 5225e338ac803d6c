"""Web 服务器"""

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from inkies import config
from inkies.export import ExportError, ExportKind
from inkies.render import PreviewUpdate, RenderMode
from inkies.runtime import RuntimeComponents
from inkies.snippets import catalogue
from inkies.telemetry import get_logger, metrics
from inkies.web.handlers import MessageHandler

logger = get_logger(__name__)


class DocumentCreateRequest(BaseModel):
    """创建文档请求体"""

    title: str = "Untitled"
    content: str = ""


class DocumentTextRequest(BaseModel):
    """更新文档内容请求体"""

    content: str


class DocumentResponse(BaseModel):
    """文档响应"""

    document_id: str
    title: str
    generation: int = 0


class WebServer:
    """编辑器 Web 服务器

    - WebSocket: 接收编辑，广播预览更新
    - HTTP: 文档创建、预览获取、导出下载、代码片段
    """

    def __init__(self, components: RuntimeComponents):
        self.app = FastAPI(title="inkies")
        self.components = components
        self.clients: list[WebSocket] = []

        self.templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))

        self._handler = MessageHandler(
            coordinator=components.coordinator,
            documents=components.documents,
        )

        self._setup_routes()
        components.coordinator.on_update(self._on_preview_update)

    async def _on_preview_update(self, update: PreviewUpdate):
        """预览更新回调"""
        await self.broadcast(update.to_dict())

    def _setup_routes(self):
        components = self.components

        @self.app.get("/", response_class=HTMLResponse)
        async def index(request: Request):
            return self.templates.TemplateResponse(
                request,
                "index.html",
                {"documents": components.documents.titles()},
            )

        @self.app.get("/api/documents")
        async def list_documents():
            return components.documents.titles()

        @self.app.post("/api/documents", response_model=DocumentResponse)
        async def create_document(body: DocumentCreateRequest):
            document = components.documents.create(title=body.title, content=body.content)
            generation = await components.coordinator.on_text_changed(
                document.document_id, document.content
            )
            return DocumentResponse(
                document_id=document.document_id, title=document.title, generation=generation
            )

        @self.app.put("/api/documents/{document_id}/text", response_model=DocumentResponse)
        async def update_text(document_id: str, body: DocumentTextRequest):
            document = components.documents.set_content(document_id, body.content)
            generation = await components.coordinator.on_text_changed(document_id, body.content)
            return DocumentResponse(
                document_id=document_id, title=document.title, generation=generation
            )

        @self.app.get("/api/documents/{document_id}/preview", response_class=HTMLResponse)
        async def get_preview(document_id: str):
            """最近一次渲染的预览页面"""
            artifact = components.renderer.last_artifact(document_id)
            if artifact is not None:
                html = artifact.html
            else:
                html = components.renderer.build(RenderMode.empty())
            return HTMLResponse(content=html, headers={"Cache-Control": "no-cache"})

        @self.app.get("/api/documents/{document_id}/export/{kind}")
        async def export_document(document_id: str, kind: ExportKind):
            """导出文档，失败时返回完整编译诊断"""
            document = components.documents.get(document_id)
            if document is None:
                raise HTTPException(status_code=404, detail="Document not found")

            try:
                artifact = await components.exporter.export(
                    document_id, document.content, kind, title=document.title
                )
            except ExportError as e:
                return JSONResponse(
                    status_code=422,
                    content={"kind": e.failure.value, "message": e.message},
                )

            return Response(
                content=artifact.content,
                media_type=artifact.media_type,
                headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
            )

        @self.app.get("/api/snippets")
        async def list_snippets():
            return catalogue()

        @self.app.get("/api/metrics")
        async def get_metrics():
            return metrics.snapshot()

        @self.app.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            await websocket.accept()
            self.clients.append(websocket)
            try:
                while True:
                    data = await websocket.receive_text()
                    await self._handler.handle(websocket, data)
            except WebSocketDisconnect:
                if websocket in self.clients:
                    self.clients.remove(websocket)

    async def broadcast(self, data: dict):
        """广播消息给所有客户端，发送失败的客户端被移除"""
        for client in list(self.clients):
            try:
                await client.send_json(data)
            except Exception as e:
                logger.debug(f"[WebServer] Dropping client: {e}")
                if client in self.clients:
                    self.clients.remove(client)
