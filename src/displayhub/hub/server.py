"""Hub 本体

プロデューサーからのメッセージを受け付け、接続中のビューアーへ配信し、
直近の履歴を保持し、ユーザー応答を待機中の呼び出しに対応付ける。

1つのホスト・ポートを所有するHubは1プロセスだけ。
後から起動したプロセスはポートの衝突を検知してリレーモードになり、
自分のメッセージを稼働中のHubへ転送する。
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from enum import StrEnum

import uvicorn

from ..core.binding import Binder, BindOutcome, PortBindError, bind_port, default_binder
from ..core.config import DisplayHubSettings, get_settings
from ..core.correlator import HubShutdownError, ResponseCorrelator
from ..core.message_store import MessageStore
from ..core.messages import (
    ALL_CHANNELS,
    PANELS_CHANNEL,
    ChannelCreateMessage,
    DisplayMessage,
    ResponseMessage,
    make_clear_message,
)
from .app import create_app
from .relay import RelayClient
from .viewers import ViewerRegistry

logger = logging.getLogger(__name__)


class HubState(StrEnum):
    """Hubのライフサイクル状態"""

    UNSTARTED = "unstarted"
    STARTING = "starting"
    DIRECT = "direct"
    RELAY = "relay"
    STOPPED = "stopped"


class HubStartupError(Exception):
    """ポートは確保できたがサーバーが起動しなかった"""


class _EmbeddedServer(uvicorn.Server):
    """シグナル処理を所有プロセスに任せる uvicorn サーバー"""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class Hub:
    """表示Hub

    Args:
        settings: 設定（省略時は get_settings()）
        host: 待ち受けホスト（省略時は設定値）
        port: 待ち受けポート（省略時は設定値。0 なら空きポート）
        binder: ポートバインド関数（テスト用に差し替え可能）
    """

    def __init__(
        self,
        settings: DisplayHubSettings | None = None,
        *,
        host: str | None = None,
        port: int | None = None,
        binder: Binder = default_binder,
    ) -> None:
        self.settings = settings or get_settings()
        self.host = host or self.settings.server.host
        self._port = port if port is not None else self.settings.get_port()
        self._binder = binder
        self._state = HubState.UNSTARTED

        self.store = MessageStore(self.settings.hub.max_messages)
        self.correlator = ResponseCorrelator()
        self.viewers = ViewerRegistry()
        self.relay: RelayClient | None = None

        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self.app = create_app(self)

    # ------------------------------------------------------------------
    # プロパティ
    # ------------------------------------------------------------------

    @property
    def state(self) -> HubState:
        return self._state

    @property
    def port(self) -> int:
        return self._port

    @property
    def url(self) -> str:
        """ブラウザ・リレーから接続するためのベースURL"""
        host = self.host
        if host in ("", "0.0.0.0"):
            host = "127.0.0.1"
        elif host == "::":
            host = "::1"
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self._port}"

    @property
    def viewer_count(self) -> int:
        return len(self.viewers)

    def is_relay(self) -> bool:
        return self._state == HubState.RELAY

    # ------------------------------------------------------------------
    # ライフサイクル
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Hubを起動

        ポートを確保できればビューアーを受け付ける direct モード、
        既に他プロセスが使用中ならリレーモードになる。どちらも成功として True を返す。

        Raises:
            PortBindError: 使用中以外の理由でバインドできなかった場合
            HubStartupError: サーバーが起動しなかった場合
        """
        if self._state != HubState.UNSTARTED:
            logger.warning(f"Hub は既に起動しています (state={self._state})")
            return True

        self._state = HubState.STARTING
        result = bind_port(self.host, self._port, self._binder)

        if result.outcome == BindOutcome.ADDRESS_IN_USE:
            self._state = HubState.RELAY
            self.relay = RelayClient(self.url, timeout=self.settings.hub.relay_timeout_seconds)
            logger.info(f"ポート {self._port} は使用中のため、リレーモードで起動します: {self.url}")
            return True

        if result.outcome == BindOutcome.ERROR or result.sock is None:
            self._state = HubState.UNSTARTED
            raise PortBindError(self.host, self._port, result.error or OSError("no socket"))

        sock = result.sock
        self._port = result.port or self._port

        config = uvicorn.Config(
            self.app,
            log_config=None,
            log_level=self.settings.logging.level.lower(),
            access_log=False,
            lifespan="off",
            timeout_graceful_shutdown=int(self.settings.hub.shutdown_timeout_seconds),
        )
        self._server = _EmbeddedServer(config)
        self._serve_task = asyncio.create_task(self._server.serve(sockets=[sock]))

        while not self._server.started:
            if self._serve_task.done():
                self._state = HubState.UNSTARTED
                sock.close()
                cause = None if self._serve_task.cancelled() else self._serve_task.exception()
                raise HubStartupError(f"Hub server failed to start on {self.url}") from cause
            await asyncio.sleep(0.01)

        self._state = HubState.DIRECT
        logger.info(f"Hub を起動しました: {self.url}")
        return True

    async def stop(self) -> None:
        """Hubを停止（冪等）

        新規接続の受付を止め、待機中の応答をすべて停止エラーで失敗させ、
        ネットワーク資源を解放する。
        """
        if self._state == HubState.STOPPED:
            return
        self._state = HubState.STOPPED

        self.viewers.close_all()

        failed = self.correlator.fail_all(HubShutdownError)
        if failed:
            logger.info(f"Hub 停止により {failed} 件の応答待ちを中断しました")

        if self._server is not None and self._serve_task is not None:
            self._server.should_exit = True
            try:
                await asyncio.wait_for(
                    self._serve_task, timeout=self.settings.hub.shutdown_timeout_seconds
                )
            except TimeoutError:
                logger.warning("Hub サーバーの停止がタイムアウトしました")
            self._server = None
            self._serve_task = None

        if self.relay is not None:
            await self.relay.aclose()

        logger.info("Hub を停止しました")

    async def __aenter__(self) -> Hub:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # メッセージ
    # ------------------------------------------------------------------

    async def send_message(self, msg: DisplayMessage) -> None:
        """プロデューサー向けの送信口

        direct モードでは push_message と同じ。リレーモードでは稼働中のHubへ転送する。
        転送に失敗しても例外は送出しない。停止後のメッセージは破棄する。
        """
        if self._state == HubState.STOPPED:
            logger.warning(f"停止済みのHubへの送信を破棄しました: {msg.id}")
            return
        if self.relay is not None:
            await self.relay.forward(msg)
        else:
            self.push_message(msg)

    def push_message(self, msg: DisplayMessage) -> None:
        """メッセージを保存し、全ビューアーへ配信"""
        if isinstance(msg, ChannelCreateMessage) and msg.channel_name:
            self.store.add_channel(msg.channel_name)
        self.store.add(msg)
        self._broadcast(msg)

    def clear_channel(self, channel: str | None = None) -> None:
        """チャンネル（省略時は全体）を消去し、ビューアーへ通知"""
        self.store.clear(channel)
        self._broadcast(make_clear_message(channel or ALL_CHANNELS))

    def clear_panels(self) -> None:
        """パネルを消去し、ビューアーへ通知"""
        self.store.clear_panels()
        self._broadcast(make_clear_message(PANELS_CHANNEL))

    def _broadcast(self, msg: DisplayMessage) -> None:
        self.viewers.broadcast(msg.to_json())

    # ------------------------------------------------------------------
    # 応答
    # ------------------------------------------------------------------

    async def wait_for_response(
        self, response_id: str, timeout: float | None = None
    ) -> ResponseMessage:
        """responseId に一致する応答を待つ

        Args:
            response_id: プロンプトに埋め込んだ responseId
            timeout: タイムアウト秒（省略時は設定値、既定 300 秒）

        Raises:
            ResponseTimeoutError: タイムアウトした場合
            HubShutdownError: Hubが停止済み、または待機中に停止した場合
        """
        if self._state == HubState.STOPPED:
            raise HubShutdownError(response_id)
        if timeout is None:
            timeout = self.settings.hub.response_timeout_seconds
        return await self.correlator.register(response_id, timeout)

    def resolve_response(self, response: ResponseMessage) -> bool:
        """応答を待機中の呼び出しに渡す"""
        return self.correlator.resolve(response)

    def handle_viewer_frame(self, raw: str | bytes) -> None:
        """ビューアーから届いたフレームを処理

        responseId を含むJSONだけを応答として扱い、それ以外は捨てる。
        """
        try:
            data = json.loads(raw)
            if not isinstance(data, dict) or not data.get("responseId"):
                return
            self.resolve_response(ResponseMessage.parse(data))
        except ValueError as e:
            logger.debug(f"ビューアーからの不正なフレームを無視: {e}")
