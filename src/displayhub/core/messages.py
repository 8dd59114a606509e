"""表示メッセージモデル

エージェントがダッシュボードへ送る DisplayMessage と、
ビューアーから返される ResponseMessage の定義。

DisplayMessage は kind をタグとするバリアント型。
組み込みの kind ごとに型付きのペイロードを持つ。ペイロードの値は
ビューアーが解釈するため、省略や想定外の値もそのまま受け付ける。
未知の kind は ExtensionMessage として扱う（前方互換性）。
"""

from __future__ import annotations

import json
import time
from enum import StrEnum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# =============================================================================
# 定数
# =============================================================================

DEFAULT_CHANNEL = "general"
ALL_CHANNELS = "__all__"
PANELS_CHANNEL = "__panels__"
SYSTEM_SESSION = "system"

# clear メッセージ以外では使用できないチャンネル名
RESERVED_CHANNELS = frozenset({ALL_CHANNELS, PANELS_CHANNEL})

# 送信側が省略してもワイヤ形式に必ず含めるフィールド
ENVELOPE_FIELDS = frozenset({"id", "kind", "channel", "session_id", "timestamp"})


class DisplayKind(StrEnum):
    """組み込みのメッセージ種別"""

    HTML = "html"
    MARKDOWN = "markdown"
    TEXT = "text"
    IMAGE = "image"
    CODE = "code"
    NOTIFICATION = "notification"
    CHART = "chart"
    PANEL_CREATE = "panel_create"
    PANEL_UPDATE = "panel_update"
    PANEL_REMOVE = "panel_remove"
    CHANNEL_CREATE = "channel_create"
    CLEAR = "clear"
    PROMPT = "prompt"
    INTERACTIVE = "interactive"
    REGISTER_RENDERER = "register_renderer"


PANEL_KINDS = frozenset({DisplayKind.PANEL_CREATE, DisplayKind.PANEL_UPDATE, DisplayKind.PANEL_REMOVE})


def generate_message_id() -> str:
    """メッセージIDを生成"""
    return str(uuid4())


def now_ms() -> int:
    """現在時刻をエポックミリ秒で取得"""
    return int(time.time() * 1000)


# =============================================================================
# 基底モデル
# =============================================================================


class WireModel(BaseModel):
    """ワイヤ形式（camelCase）でやり取りするモデルの基底クラス

    未知のフィールドは保持したまま往復させる。
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON互換の辞書に変換

        送信側が指定したフィールドだけを出力する。明示的な null はそのまま残る。
        """
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def to_json(self) -> str:
        """JSON文字列にシリアライズ"""
        return json.dumps(self.to_wire(), ensure_ascii=False)


class DisplayMessageBase(WireModel):
    """表示メッセージの共通エンベロープ"""

    id: str = Field(default_factory=generate_message_id, description="メッセージID")
    kind: str = Field(..., min_length=1, description="メッセージ種別")
    channel: str = Field(default=DEFAULT_CHANNEL, min_length=1, description="チャンネル名")
    session_id: str = Field(default="", description="送信元セッションID")
    timestamp: int | float = Field(default_factory=now_ms, description="作成時刻 (エポックミリ秒)")

    @model_validator(mode="after")
    def _check_reserved_channel(self) -> DisplayMessageBase:
        if self.kind != DisplayKind.CLEAR and self.channel in RESERVED_CHANNELS:
            raise ValueError(f"channel '{self.channel}' is reserved")
        # Hubが補完したエンベロープも常にワイヤ形式に含める
        self.model_fields_set.update(ENVELOPE_FIELDS)
        return self

    @property
    def is_panel(self) -> bool:
        return self.kind in PANEL_KINDS


# =============================================================================
# 組み込みバリアント
# =============================================================================


class ContentMessage(DisplayMessageBase):
    """HTML / Markdown / テキスト"""

    kind: Literal["html", "markdown", "text"]
    title: str | None = None
    content: str | None = None


class ImageMessage(DisplayMessageBase):
    kind: Literal["image"] = "image"
    data: str | None = None
    # url / base64 / png / jpg / gif / svg
    format: str | None = None
    caption: str | None = None


class CodeMessage(DisplayMessageBase):
    kind: Literal["code"] = "code"
    code: str | None = None
    language: str | None = None
    title: str | None = None


class NotificationMessage(DisplayMessageBase):
    kind: Literal["notification"] = "notification"
    title: str | None = None
    message: str | None = None
    # info / success / warning / error
    level: str | None = None


class ChartMessage(DisplayMessageBase):
    kind: Literal["chart"] = "chart"
    title: str | None = None
    # bar / line / pie / doughnut / table
    chart_type: str | None = None
    chart_data: Any = None


class PanelMessage(DisplayMessageBase):
    """パネルの作成・更新・削除

    panel_id は更新をまたいで安定した、送信側が決める識別子。
    """

    kind: Literal["panel_create", "panel_update", "panel_remove"]
    panel_id: str | None = None
    panel_title: str | None = None
    panel_content: str | None = None
    # sidebar / bottom
    panel_position: str | None = None


class ChannelCreateMessage(DisplayMessageBase):
    kind: Literal["channel_create"] = "channel_create"
    channel_name: str | None = None
    channel_icon: str | None = None


class ClearMessage(DisplayMessageBase):
    """チャンネルまたはパネルが消去されたことを通知する制御メッセージ"""

    kind: Literal["clear"] = "clear"
    content: str | None = None


class PromptMessage(DisplayMessageBase):
    kind: Literal["prompt"] = "prompt"
    prompt: str | None = None
    # {type: button|text|select, label, id, options?, placeholder?, defaultValue?}
    inputs: list[Any] = Field(default_factory=list)
    response_id: str | None = None


class InteractiveMessage(DisplayMessageBase):
    kind: Literal["interactive"] = "interactive"
    html: str | None = None
    # {id, label?}
    callbacks: list[Any] = Field(default_factory=list)
    response_id: str | None = None


class RegisterRendererMessage(DisplayMessageBase):
    kind: Literal["register_renderer"] = "register_renderer"
    renderer_kind: str | None = None
    js_code: str | None = None


class ExtensionMessage(DisplayMessageBase):
    """カスタムレンダラー向けの未知の種別

    ペイロードは追加フィールドとしてそのまま保持する。
    """

    @field_validator("kind")
    @classmethod
    def _not_builtin(cls, v: str) -> str:
        if v in DisplayKind.__members__.values():
            raise ValueError(f"kind '{v}' is a built-in kind")
        return v

    @property
    def payload(self) -> dict[str, Any]:
        """追加フィールドを取得"""
        return dict(self.model_extra or {})


DisplayMessage = (
    ContentMessage
    | ImageMessage
    | CodeMessage
    | NotificationMessage
    | ChartMessage
    | PanelMessage
    | ChannelCreateMessage
    | ClearMessage
    | PromptMessage
    | InteractiveMessage
    | RegisterRendererMessage
    | ExtensionMessage
)

# 種別からクラスへのマッピング
MESSAGE_KIND_MAP: dict[str, type[DisplayMessageBase]] = {
    DisplayKind.HTML: ContentMessage,
    DisplayKind.MARKDOWN: ContentMessage,
    DisplayKind.TEXT: ContentMessage,
    DisplayKind.IMAGE: ImageMessage,
    DisplayKind.CODE: CodeMessage,
    DisplayKind.NOTIFICATION: NotificationMessage,
    DisplayKind.CHART: ChartMessage,
    DisplayKind.PANEL_CREATE: PanelMessage,
    DisplayKind.PANEL_UPDATE: PanelMessage,
    DisplayKind.PANEL_REMOVE: PanelMessage,
    DisplayKind.CHANNEL_CREATE: ChannelCreateMessage,
    DisplayKind.CLEAR: ClearMessage,
    DisplayKind.PROMPT: PromptMessage,
    DisplayKind.INTERACTIVE: InteractiveMessage,
    DisplayKind.REGISTER_RENDERER: RegisterRendererMessage,
}


def parse_message(data: dict[str, Any] | str | bytes) -> DisplayMessage:
    """メッセージデータをパースして適切なバリアントに変換

    未知の kind は ExtensionMessage として返す（前方互換性）。

    Raises:
        json.JSONDecodeError: JSON文字列として不正な場合
        pydantic.ValidationError: kind がない、予約チャンネルを使っているなど
            エンベロープとして不正な場合
    """
    if isinstance(data, (str, bytes)):
        data = json.loads(data)
    if not isinstance(data, dict):
        raise ValueError("display message must be a JSON object")

    message_class = MESSAGE_KIND_MAP.get(data.get("kind"), ExtensionMessage)  # type: ignore[arg-type]
    return message_class.model_validate(data)  # type: ignore[return-value]


# =============================================================================
# 応答
# =============================================================================


class ResponseMessage(WireModel):
    """ビューアーからのプロンプト応答

    response_id は元のプロンプトに埋め込まれた responseId と一致する。
    value は送信側だけが解釈する不透明な値。
    """

    response_id: str = Field(..., min_length=1)
    value: Any = None
    timestamp: int | float = Field(default_factory=now_ms)

    @classmethod
    def parse(cls, data: dict[str, Any] | str | bytes) -> ResponseMessage:
        """辞書またはJSON文字列からパース"""
        if isinstance(data, (str, bytes)):
            return cls.model_validate_json(data)
        return cls.model_validate(data)


def make_clear_message(target: str) -> ClearMessage:
    """消去通知メッセージを生成

    Args:
        target: 消去したチャンネル名、ALL_CHANNELS、または PANELS_CHANNEL
    """
    return ClearMessage(
        channel=target,
        session_id=SYSTEM_SESSION,
        content=target,
    )
