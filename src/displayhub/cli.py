"""display-hub CLI

コマンドラインインターフェース。
"""

import argparse
import asyncio
import json
import logging
import sys

import httpx

from .core import DisplayHubSettings, get_settings, reload_settings
from .core.messages import DEFAULT_CHANNEL, ContentMessage

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None):
    """メインエントリーポイント"""
    parser = argparse.ArgumentParser(
        description="display-hub - エージェント向けの表示・対話Hub",
        prog="display-hub",
    )
    parser.add_argument("--config", help="設定ファイルのパス")

    subparsers = parser.add_subparsers(dest="command", help="利用可能なコマンド")

    # serve コマンド
    serve_parser = subparsers.add_parser("serve", help="Hubを単体で起動")
    serve_parser.add_argument("--host", help="バインドするホスト")
    serve_parser.add_argument("--port", type=int, help="ポート番号")

    # mcp コマンド
    subparsers.add_parser("mcp", help="Hubを起動し、MCPサーバーをstdioで実行")

    # send コマンド
    send_parser = subparsers.add_parser("send", help="稼働中のHubへメッセージを送信")
    send_parser.add_argument("text", help="表示する内容")
    send_parser.add_argument(
        "--kind", default="markdown", choices=["html", "markdown", "text"], help="内容の種別"
    )
    send_parser.add_argument("--channel", default=DEFAULT_CHANNEL, help="表示先チャンネル")
    send_parser.add_argument("--title", help="タイトル")

    # health コマンド
    subparsers.add_parser("health", help="稼働中のHubの状態を表示")

    args = parser.parse_args(argv)

    settings = reload_settings(args.config) if args.config else get_settings()
    setup_logging(settings)

    if args.command == "serve":
        return run_serve(args, settings)
    elif args.command == "mcp":
        return run_mcp(settings)
    elif args.command == "send":
        return run_send(args, settings)
    elif args.command == "health":
        return run_health(settings)
    else:
        parser.print_help()
        sys.exit(1)


def setup_logging(settings: DisplayHubSettings) -> None:
    """ログを標準エラーへ出力（標準出力はMCPのstdioが使う）"""
    logging.basicConfig(
        level=settings.logging.level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _hub_url(settings: DisplayHubSettings) -> str:
    host = settings.server.host
    if host in ("", "0.0.0.0"):
        host = "127.0.0.1"
    return f"http://{host}:{settings.get_port()}"


def run_serve(args, settings: DisplayHubSettings) -> int:
    """Hubを単体で起動（Ctrl+C で停止）"""
    from .hub import Hub

    async def _serve():
        hub = Hub(settings, host=args.host, port=args.port)
        async with hub:
            if hub.is_relay():
                print(f"ポート {hub.port} は既に使用されています: {hub.url}", file=sys.stderr)
                return 1
            print(f"✓ display-hub を起動しました: {hub.url}", file=sys.stderr)
            await asyncio.Event().wait()
        return 0

    try:
        return asyncio.run(_serve())
    except KeyboardInterrupt:
        print("\n停止しました", file=sys.stderr)
        return 0


def run_mcp(settings: DisplayHubSettings) -> int:
    """MCPサーバーを起動"""
    from .mcp_server import serve

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass
    return 0


def run_send(args, settings: DisplayHubSettings) -> int:
    """稼働中のHubへメッセージを1件送信"""
    msg = ContentMessage(
        kind=args.kind,
        content=args.text,
        title=args.title,
        channel=args.channel,
        session_id="cli",
    )
    url = _hub_url(settings)
    try:
        response = httpx.post(
            f"{url}/api/message",
            json=msg.to_wire(),
            timeout=settings.hub.relay_timeout_seconds,
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        print(f"✗ 送信に失敗しました ({url}): {e}", file=sys.stderr)
        return 1

    print(f"✓ 送信しました: {msg.id}")
    return 0


def run_health(settings: DisplayHubSettings) -> int:
    """稼働中のHubのヘルスチェック結果を表示"""
    url = _hub_url(settings)
    try:
        response = httpx.get(f"{url}/api/health", timeout=settings.hub.relay_timeout_seconds)
        response.raise_for_status()
    except httpx.HTTPError as e:
        print(f"✗ Hubに接続できません ({url}): {e}", file=sys.stderr)
        return 1

    print(json.dumps(response.json(), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
