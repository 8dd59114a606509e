"""インタラクティブ系ツールハンドラー

プロンプト表示とユーザー応答の待機、コールバック付きHTML、
カスタムレンダラー登録、ダッシュボードを開く操作。
"""

from __future__ import annotations

import asyncio
import json
import logging
import webbrowser
from typing import Any

from ...core.correlator import ResponseError
from ...core.messages import (
    DEFAULT_CHANNEL,
    InteractiveMessage,
    PromptMessage,
    RegisterRendererMessage,
    generate_message_id,
)
from .base import BaseHandler

logger = logging.getLogger(__name__)


class InteractiveHandlers(BaseHandler):
    """インタラクティブ系ツールのハンドラー"""

    async def handle_prompt_user(self, args: dict[str, Any]) -> dict[str, Any]:
        """プロンプトを表示し、ユーザーの応答を待つ"""
        try:
            inputs = self._parse_json_arg(args, "inputs")
        except json.JSONDecodeError:
            return {"error": "Invalid JSON for inputs"}

        timeout = float(args.get("timeout_seconds", 300))
        response_id = generate_message_id()
        msg = PromptMessage(
            prompt=args.get("prompt", ""),
            inputs=inputs,
            response_id=response_id,
            session_id=self._session_id,
        )

        logger.info(f"ユーザーに確認: {msg.prompt} (response_id={response_id})")
        await self._hub.send_message(msg)

        try:
            response = await self._hub.wait_for_response(response_id, timeout)
        except ResponseError as e:
            return {"error": f"Prompt timed out or failed: {e}", "response_id": response_id}

        return {"status": "answered", "response_id": response_id, "value": response.value}

    async def handle_display_interactive(self, args: dict[str, Any]) -> dict[str, Any]:
        """コールバック付きHTMLを表示（応答は待たない）"""
        try:
            callbacks = self._parse_json_arg(args, "callbacks")
        except json.JSONDecodeError:
            return {"error": "Invalid JSON for callbacks"}

        msg = InteractiveMessage(
            html=args.get("html", ""),
            callbacks=callbacks,
            channel=args.get("channel") or DEFAULT_CHANNEL,
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {
            "status": "displayed",
            "message_id": msg.id,
            "message": "Interactive content displayed",
        }

    async def handle_register_renderer(self, args: dict[str, Any]) -> dict[str, Any]:
        """カスタムレンダラーを登録"""
        kind = args.get("kind", "")
        msg = RegisterRendererMessage(
            renderer_kind=kind,
            js_code=args.get("js_code", ""),
            session_id=self._session_id,
        )
        await self._hub.send_message(msg)
        return {"status": "registered", "kind": kind, "message": f'Renderer registered for kind "{kind}"'}

    async def handle_open_dashboard(self, args: dict[str, Any]) -> dict[str, Any]:
        """既定のブラウザでダッシュボードを開く"""
        url = self._hub.url
        opened = await asyncio.to_thread(webbrowser.open, url)
        if not opened:
            return {"error": f"Could not open a browser. Dashboard URL: {url}", "url": url}
        return {"status": "opened", "url": url, "message": f"Opened dashboard at {url}"}
