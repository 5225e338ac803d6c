"""FastAPI 应用初始化"""

import asyncio

import uvicorn

from inkies import config
from inkies.runtime import RuntimeComponents, bootstrap
from inkies.telemetry import configure_logging, get_logger
from inkies.web.server import WebServer

logger = get_logger(__name__)


def create_app(components: RuntimeComponents) -> WebServer:
    """创建 Web 应用"""
    return WebServer(components)


async def start_server(host: str | None = None, port: int | None = None):
    """启动服务器"""
    components = bootstrap()
    server = create_app(components)

    uvicorn_config = uvicorn.Config(
        server.app,
        host=host or config.HOST,
        port=port or config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )
    uvicorn_server = uvicorn.Server(uvicorn_config)

    print(f"inkies editor starting at http://{uvicorn_config.host}:{uvicorn_config.port}")

    try:
        await uvicorn_server.serve()
    finally:
        await components.stop()


def main():
    """入口函数"""
    configure_logging()
    try:
        asyncio.run(start_server())
    except KeyboardInterrupt:
        print("\nServer stopped")
