"""Web 服务模块"""

from inkies.web.app import create_app
from inkies.web.server import WebServer

__all__ = ["create_app", "WebServer"]
