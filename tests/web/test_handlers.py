"""Tests for MessageHandler."""

import json
from unittest.mock import AsyncMock

import pytest

from inkies.coordinator import CompileCoordinator
from inkies.documents import InMemoryDocuments
from inkies.render import PreviewRenderer
from inkies.web.handlers import MessageHandler


@pytest.fixture
def handler(fake_invoker, fake_locator):
    coordinator = CompileCoordinator(
        PreviewRenderer(inkjs_path=""),
        invoker=fake_invoker,
        locator=fake_locator,
        debounce_seconds=0,
    )
    return MessageHandler(coordinator=coordinator, documents=InMemoryDocuments())


def sent(websocket: AsyncMock) -> list[dict]:
    return [call.args[0] for call in websocket.send_json.await_args_list]


class TestMessageHandler:
    @pytest.mark.asyncio
    async def test_edit(self, handler):
        websocket = AsyncMock()

        await handler.handle(websocket, json.dumps({"action": "edit", "document_id": "d", "text": "Hi"}))
        await handler.coordinator.wait_idle("d")

        assert sent(websocket) == [{"type": "edit_ack", "document_id": "d", "generation": 1}]
        assert handler.documents.get_content("d") == "Hi"
        assert handler.coordinator.last_update("d").mode.text == '{"inkVersion":21}'

    @pytest.mark.asyncio
    async def test_edit_missing_text(self, handler):
        websocket = AsyncMock()

        await handler.handle(websocket, json.dumps({"action": "edit", "document_id": "d"}))

        assert sent(websocket)[0]["type"] == "error"

    @pytest.mark.asyncio
    async def test_open_unknown(self, handler):
        websocket = AsyncMock()

        await handler.handle(websocket, json.dumps({"action": "open", "document_id": "x"}))

        assert sent(websocket) == [{"type": "error", "message": "unknown document: x"}]

    @pytest.mark.asyncio
    async def test_open_previews_current_content(self, handler):
        document = handler.documents.create(content="")

        await handler.handle(AsyncMock(), json.dumps({"action": "open", "document_id": document.document_id}))

        assert handler.coordinator.latest_generation(document.document_id) == 1

    @pytest.mark.asyncio
    async def test_close(self, handler):
        websocket = AsyncMock()
        await handler.coordinator.on_text_changed("d", "")

        await handler.handle(websocket, json.dumps({"action": "close", "document_id": "d"}))

        assert sent(websocket) == [{"type": "close_result", "document_id": "d"}]
        assert handler.coordinator.get_document_ids() == set()

    @pytest.mark.asyncio
    async def test_unknown_action(self, handler):
        websocket = AsyncMock()

        await handler.handle(websocket, json.dumps({"action": "dance"}))

        assert sent(websocket) == [{"type": "error", "message": "unknown action: dance"}]

    @pytest.mark.asyncio
    async def test_non_object(self, handler):
        websocket = AsyncMock()

        await handler.handle(websocket, "[1, 2]")

        assert sent(websocket)[0]["message"] == "message must be an object"
