"""表示系ツールハンドラー

テキスト・画像・コード・通知・チャートの表示。
"""

from __future__ import annotations

import json
from typing import Any

from ...core.messages import (
    DEFAULT_CHANNEL,
    ChartMessage,
    CodeMessage,
    ContentMessage,
    ImageMessage,
    NotificationMessage,
)
from .base import BaseHandler


def _titled(title: str | None) -> str:
    return f": {title}" if title else ""


class DisplayHandlers(BaseHandler):
    """表示系ツールのハンドラー"""

    async def handle_display(self, args: dict[str, Any]) -> dict[str, Any]:
        """HTML / Markdown / テキストを表示"""
        kind = args.get("type", "markdown")
        channel = args.get("channel") or DEFAULT_CHANNEL
        msg = ContentMessage(
            kind=kind,
            content=args.get("content", ""),
            title=args.get("title"),
            channel=channel,
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "displayed",
            "message_id": msg.id,
            "message": f'Displayed {kind} content{_titled(msg.title)} in channel "{channel}"',
        }

    async def handle_display_image(self, args: dict[str, Any]) -> dict[str, Any]:
        """画像を表示"""
        channel = args.get("channel") or DEFAULT_CHANNEL
        msg = ImageMessage(
            data=args.get("data", ""),
            format=args.get("format", "url"),
            caption=args.get("caption"),
            channel=channel,
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "displayed",
            "message_id": msg.id,
            "message": f'Displayed image{_titled(msg.caption)} in channel "{channel}"',
        }

    async def handle_display_code(self, args: dict[str, Any]) -> dict[str, Any]:
        """コードを表示"""
        channel = args.get("channel") or DEFAULT_CHANNEL
        msg = CodeMessage(
            code=args.get("code", ""),
            language=args.get("language", "text"),
            title=args.get("title"),
            channel=channel,
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "displayed",
            "message_id": msg.id,
            "message": f'Displayed {msg.language} code{_titled(msg.title)} in channel "{channel}"',
        }

    async def handle_show_notification(self, args: dict[str, Any]) -> dict[str, Any]:
        """トースト通知を表示"""
        msg = NotificationMessage(
            title=args.get("title", ""),
            message=args.get("message", ""),
            level=args.get("level", "info"),
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "notified",
            "message_id": msg.id,
            "message": f"Notification shown: [{msg.level}] {msg.title}",
        }

    async def handle_display_chart(self, args: dict[str, Any]) -> dict[str, Any]:
        """チャート・表を表示"""
        try:
            chart_data = self._parse_json_arg(args, "data", default="null")
        except json.JSONDecodeError:
            return {"error": "Invalid JSON data for chart"}

        chart_type = args.get("chart_type")
        channel = args.get("channel") or DEFAULT_CHANNEL
        msg = ChartMessage(
            chart_type=chart_type,
            chart_data=chart_data,
            title=args.get("title"),
            channel=channel,
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "displayed",
            "message_id": msg.id,
            "message": f'Displayed {chart_type} chart{_titled(msg.title)} in channel "{channel}"',
        }
