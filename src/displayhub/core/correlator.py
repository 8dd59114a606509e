"""応答コリレーター

プロンプトの responseId と、その応答を待っている呼び出し元を対応付ける。
各待機エントリはタイムアウト付きの Future を持ち、
応答到着・タイムアウト・Hub停止のいずれか一度だけで決着する。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .messages import ResponseMessage

logger = logging.getLogger(__name__)

# デフォルトの応答待ちタイムアウト（5分）
RESPONSE_TIMEOUT_SECONDS = 300.0


class ResponseError(Exception):
    """応答待ちの失敗"""


class ResponseTimeoutError(ResponseError, TimeoutError):
    """応答がタイムアウト内に届かなかった"""

    def __init__(self, response_id: str, timeout: float):
        super().__init__(f"Response timeout after {timeout}s (response_id={response_id})")
        self.response_id = response_id
        self.timeout = timeout


class HubShutdownError(ResponseError):
    """応答を待っている間にHubが停止した"""

    def __init__(self, response_id: str):
        super().__init__(f"Hub shutting down (response_id={response_id})")
        self.response_id = response_id


@dataclass
class PendingResponse:
    """応答待ちエントリ"""

    response_id: str
    future: asyncio.Future[ResponseMessage]
    timer: asyncio.TimerHandle


class ResponseCorrelator:
    """responseId をキーとする応答待ちテーブル

    エントリはテーブルから取り出した側（claim）だけが Future を決着させる。
    これにより応答到着とタイムアウトが競合しても決着は一度だけになる。
    """

    def __init__(self) -> None:
        self._pending: dict[str, PendingResponse] = {}

    def register(
        self, response_id: str, timeout: float = RESPONSE_TIMEOUT_SECONDS
    ) -> asyncio.Future[ResponseMessage]:
        """応答待ちを登録し、決着する Future を返す

        実行中のイベントループ上で呼び出すこと。
        """
        loop = asyncio.get_running_loop()

        previous = self._claim(response_id)
        if previous is not None:
            # 同じIDでの再登録は呼び出し側の誤り。古い待機は失敗させる
            logger.warning(f"responseId が重複して登録されました: {response_id}")
            self._settle_exception(
                previous, ResponseError(f"Superseded by a newer wait (response_id={response_id})")
            )

        future: asyncio.Future[ResponseMessage] = loop.create_future()
        timer = loop.call_later(timeout, self._expire, response_id, timeout)
        entry = PendingResponse(response_id=response_id, future=future, timer=timer)
        self._pending[response_id] = entry
        future.add_done_callback(lambda _f: self._discard(entry))
        return future

    def resolve(self, response: ResponseMessage) -> bool:
        """応答を対応する待機エントリに渡す

        Returns:
            待機中のエントリがあり、決着させた場合 True
        """
        entry = self._claim(response.response_id)
        if entry is None:
            logger.debug(f"待機中でない responseId への応答を無視: {response.response_id}")
            return False

        entry.timer.cancel()
        if entry.future.done():
            return False
        entry.future.set_result(response)
        return True

    def fail_all(self, exc_factory=HubShutdownError) -> int:
        """すべての待機エントリを失敗させ、テーブルを空にする

        Args:
            exc_factory: responseId を受け取り例外を返す呼び出し可能オブジェクト

        Returns:
            失敗させたエントリ数
        """
        entries = list(self._pending.values())
        self._pending.clear()
        for entry in entries:
            self._settle_exception(entry, exc_factory(entry.response_id))
        return len(entries)

    def pending_ids(self) -> list[str]:
        """待機中の responseId 一覧"""
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, response_id: object) -> bool:
        return response_id in self._pending

    # ------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------

    def _claim(self, response_id: str) -> PendingResponse | None:
        return self._pending.pop(response_id, None)

    def _expire(self, response_id: str, timeout: float) -> None:
        entry = self._claim(response_id)
        if entry is None:
            return
        logger.warning(f"ユーザー応答タイムアウト: response_id={response_id}")
        self._settle_exception(entry, ResponseTimeoutError(response_id, timeout))

    def _discard(self, entry: PendingResponse) -> None:
        # 呼び出し元がキャンセルした場合もエントリとタイマーを片付ける
        entry.timer.cancel()
        if self._pending.get(entry.response_id) is entry:
            del self._pending[entry.response_id]

    @staticmethod
    def _settle_exception(entry: PendingResponse, exc: BaseException) -> None:
        entry.timer.cancel()
        if not entry.future.done():
            entry.future.set_exception(exc)
