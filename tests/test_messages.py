"""表示メッセージモデルのテスト"""

import json

import pytest
from pydantic import ValidationError

from displayhub.core.messages import (
    ALL_CHANNELS,
    DEFAULT_CHANNEL,
    PANELS_CHANNEL,
    SYSTEM_SESSION,
    ChartMessage,
    ContentMessage,
    ExtensionMessage,
    PanelMessage,
    PromptMessage,
    ResponseMessage,
    make_clear_message,
    parse_message,
)


class TestParseMessage:
    """parse_message のテスト"""

    def test_parse_builtin_kind(self):
        """組み込みの kind は対応するバリアントになる"""
        # Arrange
        data = {"id": "m1", "kind": "markdown", "channel": "general", "content": "# Hi"}

        # Act
        msg = parse_message(data)

        # Assert
        assert isinstance(msg, ContentMessage)
        assert msg.content == "# Hi"
        assert msg.channel == "general"

    def test_parse_camel_case_fields(self):
        """ワイヤ形式の camelCase フィールドを読み取る"""
        # Arrange
        raw = json.dumps(
            {
                "id": "p1",
                "kind": "panel_create",
                "sessionId": "abcd1234",
                "panelId": "status",
                "panelTitle": "Status",
                "panelContent": "ok",
                "panelPosition": "bottom",
            }
        )

        # Act
        msg = parse_message(raw)

        # Assert
        assert isinstance(msg, PanelMessage)
        assert msg.panel_id == "status"
        assert msg.session_id == "abcd1234"
        assert msg.is_panel is True

    def test_unknown_kind_becomes_extension(self):
        """未知の kind は追加フィールドを保持した ExtensionMessage になる"""
        # Arrange
        data = {"kind": "mermaid", "diagram": "graph TD; A-->B"}

        # Act
        msg = parse_message(data)

        # Assert
        assert isinstance(msg, ExtensionMessage)
        assert msg.payload == {"diagram": "graph TD; A-->B"}
        assert msg.to_wire()["diagram"] == "graph TD; A-->B"

    def test_defaults_are_filled(self):
        """省略された id・channel・timestamp は補完される"""
        # Act
        msg = parse_message({"kind": "text", "content": "hello"})

        # Assert
        assert msg.id
        assert msg.channel == DEFAULT_CHANNEL
        assert msg.timestamp > 0

    def test_missing_kind_is_rejected(self):
        """kind のないメッセージは不正"""
        with pytest.raises(ValidationError):
            parse_message({"content": "hello"})

    def test_invalid_json_raises(self):
        """JSONとして不正な文字列は JSONDecodeError"""
        with pytest.raises(json.JSONDecodeError):
            parse_message("{not json")

    def test_non_object_is_rejected(self):
        """オブジェクト以外のJSONは拒否する"""
        with pytest.raises(ValueError):
            parse_message("[1, 2, 3]")

    @pytest.mark.parametrize(
        "data",
        [
            {"kind": "image", "format": "webp"},
            {"kind": "notification", "level": "debug"},
            {"kind": "chart", "chartType": "scatter"},
            {"kind": "prompt", "inputs": [{"type": "button", "label": "Yes"}]},
            {"kind": "panel_update", "panelContent": "x"},
            {"kind": "interactive", "callbacks": [{"label": "no id"}]},
        ],
    )
    def test_unexpected_payload_values_are_accepted(self, data):
        """ペイロードの想定外の値や欠けたフィールドは受け付ける"""
        # Act
        msg = parse_message(data)

        # Assert
        wire = msg.to_wire()
        for key, value in data.items():
            assert wire[key] == value

    @pytest.mark.parametrize("channel", [ALL_CHANNELS, PANELS_CHANNEL])
    def test_reserved_channel_is_rejected(self, channel):
        """予約チャンネルは clear 以外では使えない"""
        with pytest.raises(ValidationError):
            parse_message({"kind": "text", "channel": channel, "content": "x"})


class TestWireFormat:
    """ワイヤ形式への変換のテスト"""

    def test_to_wire_uses_camel_case_and_omits_unset(self):
        """camelCase で出力し、未設定フィールドは省略する"""
        # Arrange
        msg = ChartMessage(
            id="c1",
            chart_type="bar",
            chart_data={"labels": ["a"], "datasets": []},
            timestamp=1700000000000,
        )

        # Act
        wire = msg.to_wire()

        # Assert
        assert wire == {
            "id": "c1",
            "kind": "chart",
            "channel": "general",
            "sessionId": "",
            "timestamp": 1700000000000,
            "chartType": "bar",
            "chartData": {"labels": ["a"], "datasets": []},
        }

    def test_prompt_inputs_are_serialized(self):
        """プロンプトの入力定義と responseId を出力する"""
        # Arrange
        msg = PromptMessage(
            prompt="Deploy?",
            inputs=[{"type": "button", "label": "Yes", "id": "yes"}],
            response_id="r1",
        )

        # Act
        wire = json.loads(msg.to_json())

        # Assert
        assert wire["responseId"] == "r1"
        assert wire["inputs"] == [{"type": "button", "label": "Yes", "id": "yes"}]

    def test_explicit_null_is_kept(self):
        """送信側が明示した null は省略せずに出力する"""
        # Arrange
        data = {"id": "n1", "kind": "text", "title": None, "content": "x", "timestamp": 1}

        # Act
        wire = parse_message(data).to_wire()

        # Assert
        assert wire["title"] is None
        assert wire["content"] == "x"
        assert wire["channel"] == "general"
        assert wire["sessionId"] == ""


class TestClearMessage:
    """消去通知メッセージのテスト"""

    def test_clear_may_target_reserved_channel(self):
        """clear は予約チャンネルを対象にできる"""
        # Act
        msg = make_clear_message(PANELS_CHANNEL)

        # Assert
        assert msg.kind == "clear"
        assert msg.channel == PANELS_CHANNEL
        assert msg.content == PANELS_CHANNEL
        assert msg.session_id == SYSTEM_SESSION


class TestResponseMessage:
    """ResponseMessage のテスト"""

    def test_parse_from_json(self):
        """JSON文字列から応答をパースする"""
        # Act
        resp = ResponseMessage.parse('{"responseId": "r1", "value": {"choice": "yes"}, "timestamp": 1}')

        # Assert
        assert resp.response_id == "r1"
        assert resp.value == {"choice": "yes"}

    def test_missing_response_id_is_rejected(self):
        """responseId のない応答は不正"""
        with pytest.raises(ValidationError):
            ResponseMessage.parse({"value": 1})
