"""display-hub

エージェントが送る表示イベント（テキスト・画像・コード・チャート・プロンプト）を
ダッシュボードへ配信し、必要に応じてユーザーの応答を待ち受けるローカルHub。
"""

__version__ = "0.1.0"
