"""ハンドラー基底クラス

共通のHub取得機能を提供。
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ...hub import Hub

if TYPE_CHECKING:
    from ..server import DisplayMCPServer


class BaseHandler:
    """ハンドラー基底クラス"""

    def __init__(self, server: DisplayMCPServer):
        self._server = server

    @property
    def _hub(self) -> Hub:
        """Hubを取得"""
        return self._server.hub

    @property
    def _session_id(self) -> str:
        """このプロセスのセッションIDを取得"""
        return self._server.session_id

    @staticmethod
    def _parse_json_arg(args: dict[str, Any], name: str, default: str = "[]") -> Any:
        """JSON文字列の引数をパース

        Raises:
            json.JSONDecodeError: JSONとして不正な場合
        """
        value = args.get(name, default)
        if isinstance(value, str):
            return json.loads(value)
        return value
