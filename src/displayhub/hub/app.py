"""Hub HTTP / WebSocket エンドポイント

FastAPIベースのリクエスト/レスポンスAPIと、
ビューアー向けの永続WebSocketチャンネル。
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse, Response

from .. import __version__
from ..core.config import CORSConfig
from ..core.messages import ResponseMessage, parse_message

if TYPE_CHECKING:
    from .server import Hub

logger = logging.getLogger(__name__)

DEFAULT_DASHBOARD_PATH = Path(__file__).resolve().parent.parent / "dashboard" / "index.html"
FALLBACK_DASHBOARD_HTML = "<html><body><h1>Dashboard not found</h1></body></html>"


def load_dashboard(path: str | Path | None = None) -> str:
    """ダッシュボードHTMLを読み込む（見つからなければ代替ページ）"""
    dashboard_path = Path(path) if path else DEFAULT_DASHBOARD_PATH
    try:
        return dashboard_path.read_text(encoding="utf-8")
    except OSError:
        logger.warning(f"ダッシュボードが見つかりません: {dashboard_path}")
        return FALLBACK_DASHBOARD_HTML


def _cors_headers(cors: CORSConfig, origin: str | None) -> dict[str, str]:
    if not cors.enabled:
        return {}
    if "*" in cors.allow_origins:
        allow_origin = "*"
    elif origin and origin in cors.allow_origins:
        allow_origin = origin
    else:
        return {}
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ", ".join(cors.allow_methods),
        "Access-Control-Allow-Headers": ", ".join(cors.allow_headers),
    }


def create_app(hub: Hub) -> FastAPI:
    """Hub に紐づくFastAPIアプリケーションを生成"""
    settings = hub.settings
    dashboard_html = load_dashboard(settings.hub.dashboard_path)

    app = FastAPI(
        title="display-hub",
        description="エージェントの表示イベントを配信し、ユーザー応答を受け付けるHub",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # --- CORS ---

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        headers = _cors_headers(settings.server.cors, request.headers.get("origin"))
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response

    # --- ダッシュボード ---

    @app.get("/", response_class=HTMLResponse)
    @app.get("/index.html", response_class=HTMLResponse)
    async def dashboard() -> HTMLResponse:
        """ダッシュボードHTML"""
        return HTMLResponse(dashboard_html)

    # --- API ---

    @app.post("/api/message")
    async def post_message(request: Request) -> Any:
        """表示メッセージを投稿"""
        try:
            msg = parse_message(await request.body())
        except json.JSONDecodeError:
            return JSONResponse({"error": "Invalid JSON"}, status_code=400)
        except ValueError as e:
            logger.debug(f"不正なメッセージを拒否: {e}")
            return JSONResponse({"error": "Invalid message"}, status_code=400)

        hub.push_message(msg)
        return {"ok": True}

    @app.post("/api/response")
    async def post_response(request: Request) -> Any:
        """プロンプトへの応答を投稿"""
        try:
            resp = ResponseMessage.parse(await request.body())
        except ValueError as e:
            logger.debug(f"不正な応答を拒否: {e}")
            return JSONResponse({"error": "Invalid JSON"}, status_code=400)

        hub.resolve_response(resp)
        return {"ok": True}

    @app.get("/api/history")
    async def get_history(channel: str | None = None) -> dict[str, Any]:
        """メッセージ履歴とチャンネル一覧を取得"""
        return {
            "messages": [m.to_wire() for m in hub.store.get_all(channel)],
            "channels": hub.store.get_channels(),
        }

    @app.get("/api/health")
    async def health_check() -> dict[str, Any]:
        """ヘルスチェック"""
        return {"status": "ok", "clients": hub.viewer_count}

    # --- ビューアーチャンネル ---

    @app.websocket("/ws")
    async def viewer_socket(websocket: WebSocket) -> None:
        """ビューアーの永続チャンネル

        サーバー→クライアント: 以後のブロードキャストをすべて送る。
        クライアント→サーバー: responseId を含むJSONを応答として扱い、
        それ以外は黙って捨てる。
        """
        await websocket.accept()
        viewer = hub.viewers.connect(websocket)

        async def consume_input() -> None:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    return
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes")
                if raw:
                    hub.handle_viewer_frame(raw)

        sender = asyncio.create_task(viewer.pump())
        receiver = asyncio.create_task(consume_input())
        try:
            done, pending = await asyncio.wait(
                {sender, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for task in done:
                exc = task.exception()
                if exc and not isinstance(exc, WebSocketDisconnect):
                    logger.debug(f"ビューアー {viewer.viewer_id} の接続エラー: {exc}")
            if sender in done and sender.exception() is None:
                # Hub 停止による終了
                try:
                    await websocket.close(code=1001)
                except Exception as e:
                    logger.debug(f"ビューアー {viewer.viewer_id} のクローズに失敗: {e}")
        finally:
            hub.viewers.disconnect(viewer)
            if not sender.done():
                sender.cancel()
            if not receiver.done():
                receiver.cancel()

    return app
