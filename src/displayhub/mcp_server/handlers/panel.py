"""パネル・チャンネル系ツールハンドラー"""

from __future__ import annotations

from typing import Any

from ...core.messages import ChannelCreateMessage, PanelMessage
from .base import BaseHandler

CLEAR_TARGETS = ("channel", "panels", "all")


class PanelHandlers(BaseHandler):
    """パネル・チャンネル・消去のハンドラー"""

    async def handle_create_panel(self, args: dict[str, Any]) -> dict[str, Any]:
        """パネルを作成"""
        msg = PanelMessage(
            kind="panel_create",
            panel_id=args.get("panel_id", ""),
            panel_title=args.get("title"),
            panel_content=args.get("content"),
            panel_position=args.get("position", "sidebar"),
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "created",
            "panel_id": msg.panel_id,
            "message": f'Panel "{msg.panel_title}" created (id: {msg.panel_id})',
        }

    async def handle_update_panel(self, args: dict[str, Any]) -> dict[str, Any]:
        """パネルを更新"""
        msg = PanelMessage(
            kind="panel_update",
            panel_id=args.get("panel_id", ""),
            panel_content=args.get("content"),
            panel_title=args.get("title"),
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "updated",
            "panel_id": msg.panel_id,
            "message": f'Panel "{msg.panel_id}" updated',
        }

    async def handle_remove_panel(self, args: dict[str, Any]) -> dict[str, Any]:
        """パネルを削除"""
        msg = PanelMessage(
            kind="panel_remove",
            panel_id=args.get("panel_id", ""),
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "removed",
            "panel_id": msg.panel_id,
            "message": f'Panel "{msg.panel_id}" removed',
        }

    async def handle_create_channel(self, args: dict[str, Any]) -> dict[str, Any]:
        """チャンネルを作成"""
        name = args.get("name", "")
        msg = ChannelCreateMessage(
            channel_name=name,
            channel_icon=args.get("icon"),
            channel=name,
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {"status": "created", "channel": name, "message": f'Channel "{name}" created'}

    async def handle_clear(self, args: dict[str, Any]) -> dict[str, Any]:
        """チャンネル・パネル・すべてを消去"""
        target = args.get("target")
        channel = args.get("channel")

        if target not in CLEAR_TARGETS:
            return {"error": f"Unknown clear target: {target}"}

        if target == "panels":
            self._hub.clear_panels()
        elif target == "channel":
            self._hub.clear_channel(channel)
        else:
            self._hub.clear_channel()
            self._hub.clear_panels()

        suffix = f": {channel}" if channel else ""
        return {"status": "cleared", "target": target, "message": f"Cleared {target}{suffix}"}
