"""ビューアー接続管理

WebSocketで接続したダッシュボードの集合と、その配信キュー。
各接続は専用の送信キューを持つため、ブロードキャスト順序は
push の順序と一致し、1つの接続の失敗が他の接続に影響しない。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from uuid import uuid4

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# 1接続あたりの未送信メッセージ上限。超えた接続は切断する
MAX_PENDING_FRAMES = 1000


class ViewerConnection:
    """1つのビューアー接続"""

    def __init__(self, websocket: WebSocket, max_pending: int = MAX_PENDING_FRAMES) -> None:
        self.websocket = websocket
        self.viewer_id = str(uuid4())[:8]
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=max_pending + 1)
        self._max_pending = max_pending
        self.closed = False

    def enqueue(self, payload: str) -> bool:
        """送信キューにフレームを追加

        Returns:
            追加できた場合 True。閉じている、または滞留が上限を超えた場合 False
        """
        if self.closed or self._queue.qsize() >= self._max_pending:
            return False
        self._queue.put_nowait(payload)
        return True

    def close(self) -> None:
        """送信ループに終了を通知"""
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(None)

    async def pump(self) -> None:
        """キューのフレームをWebSocketへ送信し続ける

        close() されると正常終了し、送信に失敗すると例外を送出する。
        """
        while True:
            payload = await self._queue.get()
            if payload is None:
                return
            await self.websocket.send_text(payload)


class ViewerRegistry:
    """接続中ビューアーの集合"""

    def __init__(self) -> None:
        self._viewers: dict[str, ViewerConnection] = {}

    def connect(self, websocket: WebSocket) -> ViewerConnection:
        """ビューアーを登録"""
        viewer = ViewerConnection(websocket)
        self._viewers[viewer.viewer_id] = viewer
        logger.debug(f"ビューアー接続: {viewer.viewer_id} (接続数={len(self._viewers)})")
        return viewer

    def disconnect(self, viewer: ViewerConnection) -> None:
        """ビューアーを登録解除"""
        viewer.close()
        if self._viewers.pop(viewer.viewer_id, None) is not None:
            logger.debug(f"ビューアー切断: {viewer.viewer_id} (接続数={len(self._viewers)})")

    def broadcast(self, payload: str) -> int:
        """全ビューアーにフレームを配信

        受け取れなかった接続は集合から外す。再送はしない。

        Returns:
            配信キューに載せた接続数
        """
        delivered = 0
        for viewer in list(self._viewers.values()):
            if viewer.enqueue(payload):
                delivered += 1
            else:
                logger.debug(f"配信できないビューアーを切断: {viewer.viewer_id}")
                self.disconnect(viewer)
        return delivered

    def close_all(self) -> None:
        """全ビューアーの送信ループを終了させる"""
        for viewer in list(self._viewers.values()):
            self.disconnect(viewer)

    def __len__(self) -> int:
        return len(self._viewers)

    def __iter__(self) -> Iterator[ViewerConnection]:
        return iter(list(self._viewers.values()))
