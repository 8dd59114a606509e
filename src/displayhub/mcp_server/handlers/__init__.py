"""MCPツールハンドラー

ツールの種類ごとにハンドラーを分割。
"""

from .base import BaseHandler
from .display import DisplayHandlers
from .interactive import InteractiveHandlers
from .panel import PanelHandlers

__all__ = [
    "BaseHandler",
    "DisplayHandlers",
    "InteractiveHandlers",
    "PanelHandlers",
]
