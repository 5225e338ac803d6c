"""WebSocket 消息处理器"""

import json
from dataclasses import dataclass

from fastapi import WebSocket

from inkies.coordinator import CompileCoordinator
from inkies.documents import InMemoryDocuments
from inkies.snippets import find_snippet
from inkies.telemetry import get_logger

logger = get_logger(__name__)


@dataclass
class MessageHandler:
    """WebSocket 消息处理器

    消息格式（JSON）:
    - {"action": "edit", "document_id", "text"}: 编辑，触发预览
    - {"action": "open", "document_id"}: 打开文档，按当前内容预览
    - {"action": "close", "document_id"}: 关闭文档视图
    - {"action": "snippet", "name"}: 获取代码片段
    """

    coordinator: CompileCoordinator
    documents: InMemoryDocuments

    async def handle(self, websocket: WebSocket, data: str):
        """处理 WebSocket 消息"""
        try:
            msg = json.loads(data)
        except json.JSONDecodeError:
            await self._send_error(websocket, "invalid JSON")
            return
        if not isinstance(msg, dict):
            await self._send_error(websocket, "message must be an object")
            return

        action = msg.get("action")
        if action == "edit":
            await self._handle_edit(websocket, msg)
        elif action == "open":
            await self._handle_open(websocket, msg)
        elif action == "close":
            await self._handle_close(websocket, msg)
        elif action == "snippet":
            await self._handle_snippet(websocket, msg)
        else:
            await self._send_error(websocket, f"unknown action: {action}")

    async def _handle_edit(self, websocket: WebSocket, msg: dict):
        """处理编辑（每次按键）"""
        document_id = msg.get("document_id")
        text = msg.get("text")
        if not document_id or not isinstance(text, str):
            await self._send_error(websocket, "edit requires document_id and text")
            return

        self.documents.set_content(document_id, text)
        generation = await self.coordinator.on_text_changed(document_id, text)
        await websocket.send_json({
            "type": "edit_ack",
            "document_id": document_id,
            "generation": generation,
        })

    async def _handle_open(self, websocket: WebSocket, msg: dict):
        """处理打开文档"""
        document_id = msg.get("document_id")
        if not document_id or document_id not in self.documents:
            await self._send_error(websocket, f"unknown document: {document_id}")
            return

        content = self.documents.get_content(document_id)
        await self.coordinator.on_text_changed(document_id, content)

    async def _handle_close(self, websocket: WebSocket, msg: dict):
        """处理关闭文档视图"""
        document_id = msg.get("document_id")
        if document_id:
            await self.coordinator.close_document(document_id)
        await websocket.send_json({"type": "close_result", "document_id": document_id})

    async def _handle_snippet(self, websocket: WebSocket, msg: dict):
        """处理代码片段请求"""
        snippet = find_snippet(str(msg.get("name", "")))
        if snippet is None:
            await self._send_error(websocket, f"unknown snippet: {msg.get('name')}")
            return
        await websocket.send_json({"type": "snippet", **snippet.to_dict()})

    @staticmethod
    async def _send_error(websocket: WebSocket, message: str):
        logger.debug(f"[MessageHandler] {message}")
        await websocket.send_json({"type": "error", "message": message})
