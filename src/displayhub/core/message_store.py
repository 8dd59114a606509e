"""メッセージストア

直近の表示メッセージを保持する上限付きのインメモリリングバッファと、
既知のチャンネル名の集合。
"""

from __future__ import annotations

import threading
from collections import deque

from .messages import DEFAULT_CHANNEL, DisplayMessage

# 保持するメッセージ数の上限
MAX_MESSAGES = 200


class MessageStore:
    """表示メッセージの履歴

    上限を超えると、チャンネルに関係なく最も古いメッセージから破棄する。
    チャンネル名は一度登録されるとプロセス終了まで消えない。
    """

    def __init__(self, max_messages: int = MAX_MESSAGES) -> None:
        self._lock = threading.Lock()
        self._messages: deque[DisplayMessage] = deque(maxlen=max_messages)
        # dict をキー順序付きの集合として使う
        self._channels: dict[str, None] = {DEFAULT_CHANNEL: None}

    @property
    def max_messages(self) -> int:
        return self._messages.maxlen or MAX_MESSAGES

    def add(self, msg: DisplayMessage) -> None:
        """メッセージを追加し、チャンネルを登録する"""
        with self._lock:
            self._channels.setdefault(msg.channel, None)
            self._messages.append(msg)

    def add_channel(self, name: str) -> None:
        """チャンネル名を登録"""
        with self._lock:
            self._channels.setdefault(name, None)

    def get_all(self, channel: str | None = None) -> list[DisplayMessage]:
        """メッセージのスナップショットを取得（挿入順）"""
        with self._lock:
            if channel:
                return [m for m in self._messages if m.channel == channel]
            return list(self._messages)

    def get_channels(self) -> list[str]:
        """既知のチャンネル名のスナップショットを取得"""
        with self._lock:
            return list(self._channels)

    def clear(self, channel: str | None = None) -> None:
        """チャンネルのメッセージ、またはすべてのメッセージを消去

        チャンネル名自体は残る。
        """
        with self._lock:
            if channel:
                kept = [m for m in self._messages if m.channel != channel]
                self._messages.clear()
                self._messages.extend(kept)
            else:
                self._messages.clear()

    def clear_panels(self) -> None:
        """全チャンネルからパネル系メッセージを消去"""
        with self._lock:
            kept = [m for m in self._messages if not m.is_panel]
            self._messages.clear()
            self._messages.extend(kept)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)
