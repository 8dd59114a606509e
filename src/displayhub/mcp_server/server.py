"""display-hub MCP Server

Model Context Protocol (MCP) サーバー実装。
エージェントからの表示ツール呼び出しをHubへ橋渡しする。
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any

from mcp.server import InitializationOptions, Server
from mcp.server.stdio import stdio_server
from mcp.types import ServerCapabilities, TextContent, Tool, ToolsCapability

from .. import __version__
from ..core.config import DisplayHubSettings, get_settings
from ..hub import Hub
from .handlers import DisplayHandlers, InteractiveHandlers, PanelHandlers
from .tools import get_tool_definitions

logger = logging.getLogger(__name__)


class ToolExecutionError(Exception):
    """ツールがエラー結果を返した"""


def new_session_id() -> str:
    """プロセスごとのセッションID（8文字）"""
    return uuid.uuid4().hex[:8]


class DisplayMCPServer:
    """display-hub MCP Server

    MCPプロトコルを介してエージェントとHubを接続。

    提供ツール:
    - display / display_image / display_code / display_chart: 内容を表示
    - show_notification: トースト通知
    - create_panel / update_panel / remove_panel: 常設パネル
    - create_channel / clear: チャンネル管理
    - prompt_user: ユーザーの応答を待つ
    - display_interactive / register_renderer / open_dashboard
    """

    def __init__(self, hub: Hub, session_id: str | None = None):
        self.server = Server("display-hub")
        self.hub = hub
        self.session_id = session_id or new_session_id()

        # ハンドラーを初期化
        self._display_handlers = DisplayHandlers(self)
        self._panel_handlers = PanelHandlers(self)
        self._interactive_handlers = InteractiveHandlers(self)

        self._setup_handlers()

    def _setup_handlers(self) -> None:  # pragma: no cover
        """MCPハンドラーを設定"""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """利用可能なツール一覧"""
            return get_tool_definitions()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """ツールを実行

            エラー結果は例外として送出し、isError 付きの結果にする。
            """
            result = await self.call_tool(name, arguments or {})
            return [TextContent(type="text", text=json.dumps(result, ensure_ascii=False, indent=2))]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """ツールを実行し、エラー結果なら ToolExecutionError を送出"""
        try:
            result = await self._dispatch_tool(name, arguments)
        except Exception:
            logger.exception(f"MCP tool execution error: {name}")
            raise
        if "error" in result:
            logger.warning(f"MCP tool {name} failed: {result['error']}")
            raise ToolExecutionError(result["error"])
        return result

    async def _dispatch_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """ツール名に応じてハンドラーにディスパッチ"""
        # 表示関連
        if name == "display":
            return await self._display_handlers.handle_display(arguments)
        elif name == "display_image":
            return await self._display_handlers.handle_display_image(arguments)
        elif name == "display_code":
            return await self._display_handlers.handle_display_code(arguments)
        elif name == "show_notification":
            return await self._display_handlers.handle_show_notification(arguments)
        elif name == "display_chart":
            return await self._display_handlers.handle_display_chart(arguments)
        # パネル関連
        elif name == "create_panel":
            return await self._panel_handlers.handle_create_panel(arguments)
        elif name == "update_panel":
            return await self._panel_handlers.handle_update_panel(arguments)
        elif name == "remove_panel":
            return await self._panel_handlers.handle_remove_panel(arguments)
        # チャンネル関連
        elif name == "create_channel":
            return await self._panel_handlers.handle_create_channel(arguments)
        elif name == "clear":
            return await self._panel_handlers.handle_clear(arguments)
        # インタラクティブ関連
        elif name == "prompt_user":
            return await self._interactive_handlers.handle_prompt_user(arguments)
        elif name == "display_interactive":
            return await self._interactive_handlers.handle_display_interactive(arguments)
        elif name == "register_renderer":
            return await self._interactive_handlers.handle_register_renderer(arguments)
        elif name == "open_dashboard":
            return await self._interactive_handlers.handle_open_dashboard(arguments)
        else:
            return {"error": f"Unknown tool: {name}"}

    async def run(self) -> None:  # pragma: no cover
        """stdio 上でサーバーを起動"""
        init_options = InitializationOptions(
            server_name="display-hub",
            server_version=__version__,
            capabilities=ServerCapabilities(
                tools=ToolsCapability(),
            ),
        )
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(read_stream, write_stream, init_options)


async def serve(settings: DisplayHubSettings | None = None) -> None:  # pragma: no cover
    """Hubを起動し、MCPサーバーをstdioで実行"""
    hub = Hub(settings or get_settings())
    async with hub:
        if hub.is_relay():
            logger.info(f"既存のHubへリレーします: {hub.url}")
        else:
            logger.info(f"ダッシュボード: {hub.url}")
        server = DisplayMCPServer(hub)
        logger.info(f"MCPサーバーを起動します (session={server.session_id})")
        await server.run()


def main():  # pragma: no cover
    """エントリーポイント"""
    asyncio.run(serve())


if __name__ == "__main__":  # pragma: no cover
    main()
