"""リレークライアント

ポートを確保できなかったプロセスが、稼働中のHubへ
メッセージを転送するためのベストエフォートなHTTPクライアント。
"""

from __future__ import annotations

import logging

import httpx

from ..core.messages import DisplayMessage

logger = logging.getLogger(__name__)


class RelayClient:
    """稼働中のHubへの転送クライアント

    forward() は例外を送出しない。配信失敗はログと failures で報告する。

    Args:
        base_url: 転送先HubのベースURL
        timeout: リクエストのタイムアウト秒
    """

    def __init__(self, base_url: str, timeout: float = 5.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=timeout)
        self.failures = 0

    @property
    def base_url(self) -> str:
        return self._base_url

    async def forward(self, msg: DisplayMessage) -> bool:
        """メッセージ投稿エンドポイントへ転送

        Returns:
            転送先が受理した場合 True
        """
        try:
            response = await self._client.post("/api/message", json=msg.to_wire())
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.failures += 1
            logger.warning(f"リレー転送に失敗しました ({self._base_url}): {type(e).__name__}: {e}")
            return False
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
