"""Hub モジュール

HTTP/WebSocket サーバー、ビューアー管理、リレー転送。
"""

from .app import create_app
from .relay import RelayClient
from .server import Hub, HubStartupError, HubState
from .viewers import ViewerConnection, ViewerRegistry

__all__ = [
    "Hub",
    "HubState",
    "HubStartupError",
    "create_app",
    "RelayClient",
    "ViewerConnection",
    "ViewerRegistry",
]
