"""display-hub Core モジュール

Hubのバックエンドロジックを提供:
- Config: 設定管理
- Messages: 表示メッセージ・応答モデル
- MessageStore: 上限付きの履歴
- Correlator: 応答待ちの対応付け
- Binding: ポートバインド判定
"""

from .binding import BindOutcome, BindResult, PortBindError, bind_port, classify_bind_error
from .config import DisplayHubSettings, get_settings, reload_settings
from .correlator import (
    HubShutdownError,
    ResponseCorrelator,
    ResponseError,
    ResponseTimeoutError,
)
from .message_store import MAX_MESSAGES, MessageStore
from .messages import (
    ALL_CHANNELS,
    DEFAULT_CHANNEL,
    PANEL_KINDS,
    PANELS_CHANNEL,
    DisplayKind,
    DisplayMessage,
    ResponseMessage,
    make_clear_message,
    parse_message,
)

__all__ = [
    # Config
    "get_settings",
    "reload_settings",
    "DisplayHubSettings",
    # Messages
    "DisplayKind",
    "DisplayMessage",
    "ResponseMessage",
    "parse_message",
    "make_clear_message",
    "DEFAULT_CHANNEL",
    "ALL_CHANNELS",
    "PANELS_CHANNEL",
    "PANEL_KINDS",
    # Store
    "MessageStore",
    "MAX_MESSAGES",
    # Correlator
    "ResponseCorrelator",
    "ResponseError",
    "ResponseTimeoutError",
    "HubShutdownError",
    # Binding
    "BindOutcome",
    "BindResult",
    "PortBindError",
    "bind_port",
    "classify_bind_error",
]
