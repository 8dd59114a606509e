"""MCP ツール定義

MCPで公開するツールのスキーマ定義。
"""

from mcp.types import Tool

_CHANNEL_PROPERTY = {
    "type": "string",
    "description": "表示先のチャンネル（タブ）",
    "default": "general",
}


def get_tool_definitions() -> list[Tool]:
    """利用可能なツール一覧を取得"""
    return [
        # 表示
        Tool(
            name="display",
            description="HTML・Markdown・プレーンテキストをダッシュボードに表示します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "content": {"type": "string", "description": "表示する内容"},
                    "type": {
                        "type": "string",
                        "enum": ["html", "markdown", "text"],
                        "default": "markdown",
                        "description": "内容の種別",
                    },
                    "title": {"type": "string", "description": "タイトル"},
                    "channel": _CHANNEL_PROPERTY,
                },
                "required": ["content"],
            },
        ),
        Tool(
            name="display_image",
            description="画像（URLまたはbase64）をダッシュボードに表示します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "data": {"type": "string", "description": "画像URLまたはbase64データ"},
                    "format": {
                        "type": "string",
                        "enum": ["url", "base64", "png", "jpg", "gif", "svg"],
                        "default": "url",
                        "description": "画像形式",
                    },
                    "caption": {"type": "string", "description": "キャプション"},
                    "channel": _CHANNEL_PROPERTY,
                },
                "required": ["data"],
            },
        ),
        Tool(
            name="display_code",
            description="シンタックスハイライト付きでコードを表示します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "code": {"type": "string", "description": "表示するコード"},
                    "language": {
                        "type": "string",
                        "default": "text",
                        "description": "プログラミング言語",
                    },
                    "title": {"type": "string", "description": "コードブロックのタイトル"},
                    "channel": _CHANNEL_PROPERTY,
                },
                "required": ["code"],
            },
        ),
        Tool(
            name="show_notification",
            description="ダッシュボードにトースト通知を表示します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "通知タイトル"},
                    "message": {"type": "string", "description": "通知本文"},
                    "level": {
                        "type": "string",
                        "enum": ["info", "success", "warning", "error"],
                        "default": "info",
                        "description": "通知レベル",
                    },
                },
                "required": ["title", "message"],
            },
        ),
        Tool(
            name="display_chart",
            description="チャートまたは表をダッシュボードに表示します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "data": {
                        "type": "string",
                        "description": (
                            "チャートデータのJSON文字列。Chart.js形式: "
                            "{labels: string[], datasets: [{label, data, backgroundColor?}]}。"
                            "表の場合: {headers: string[], rows: any[][]}"
                        ),
                    },
                    "chart_type": {
                        "type": "string",
                        "enum": ["bar", "line", "pie", "doughnut", "table"],
                        "description": "チャート種別",
                    },
                    "title": {"type": "string", "description": "チャートのタイトル"},
                    "channel": _CHANNEL_PROPERTY,
                },
                "required": ["data", "chart_type"],
            },
        ),
        # パネル
        Tool(
            name="create_panel",
            description="常設のパネルを作成（または置き換え）します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "panel_id": {"type": "string", "description": "パネルの一意な識別子"},
                    "title": {"type": "string", "description": "パネルのタイトル"},
                    "content": {"type": "string", "description": "パネルの内容（HTMLまたはMarkdown）"},
                    "position": {
                        "type": "string",
                        "enum": ["sidebar", "bottom"],
                        "default": "sidebar",
                        "description": "パネルの位置",
                    },
                },
                "required": ["panel_id", "title", "content"],
            },
        ),
        Tool(
            name="update_panel",
            description="既存パネルの内容を更新します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "panel_id": {"type": "string", "description": "更新するパネルの識別子"},
                    "content": {"type": "string", "description": "新しい内容"},
                    "title": {"type": "string", "description": "新しいタイトル"},
                },
                "required": ["panel_id", "content"],
            },
        ),
        Tool(
            name="remove_panel",
            description="パネルをダッシュボードから削除します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "panel_id": {"type": "string", "description": "削除するパネルの識別子"},
                },
                "required": ["panel_id"],
            },
        ),
        # チャンネル
        Tool(
            name="create_channel",
            description="名前付きのチャンネル（タブ）を作成します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "チャンネル名"},
                    "icon": {"type": "string", "description": "タブのアイコン（絵文字など）"},
                },
                "required": ["name"],
            },
        ),
        Tool(
            name="clear",
            description="チャンネル、パネル、またはすべてを消去します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "target": {
                        "type": "string",
                        "enum": ["channel", "panels", "all"],
                        "description": "消去対象",
                    },
                    "channel": {
                        "type": "string",
                        "description": "チャンネル名（target が channel の場合）",
                    },
                },
                "required": ["target"],
            },
        ),
        # インタラクティブ
        Tool(
            name="prompt_user",
            description=(
                "ダッシュボードにフォームやボタンを表示し、ユーザーの応答を待ちます。"
                "ユーザーが操作するまで戻らないブロッキング呼び出しです。"
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "prompt": {"type": "string", "description": "ユーザーに表示する質問"},
                    "inputs": {
                        "type": "string",
                        "description": (
                            "入力定義のJSON配列: "
                            '[{type: "button"|"text"|"select", label: string, id: string, '
                            "options?: string[], placeholder?: string}]"
                        ),
                    },
                    "timeout_seconds": {
                        "type": "number",
                        "default": 300,
                        "description": "タイムアウト秒（既定 300 = 5分）",
                    },
                },
                "required": ["prompt", "inputs"],
            },
        ),
        Tool(
            name="display_interactive",
            description="コールバック付きのボタン・フォームを含むHTMLを表示します。応答を待たずに戻ります。",
            inputSchema={
                "type": "object",
                "properties": {
                    "html": {
                        "type": "string",
                        "description": "操作要素に data-callback-id 属性を付けたHTML",
                    },
                    "callbacks": {
                        "type": "string",
                        "description": "コールバック定義のJSON配列: [{id: string, label?: string}]",
                    },
                    "channel": _CHANNEL_PROPERTY,
                },
                "required": ["html", "callbacks"],
            },
        ),
        # ユーティリティ
        Tool(
            name="open_dashboard",
            description="既定のブラウザでダッシュボードを開きます。",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="register_renderer",
            description="任意のメッセージ種別に対するJavaScriptレンダラーを登録します。",
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": {"type": "string", "description": "このレンダラーが扱うメッセージ種別"},
                    "js_code": {
                        "type": "string",
                        "description": "JavaScriptコード。関数シグネチャ: (msg, container) => void",
                    },
                },
                "required": ["kind", "js_code"],
            },
        ),
    ]
