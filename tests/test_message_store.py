"""メッセージストアのテスト"""

from displayhub.core.message_store import MAX_MESSAGES, MessageStore
from displayhub.core.messages import ContentMessage, PanelMessage


def _text(content: str, channel: str = "general") -> ContentMessage:
    return ContentMessage(kind="text", content=content, channel=channel)


class TestMessageStore:
    """MessageStore のテスト"""

    def test_initial_state(self):
        """初期状態は空で、general チャンネルだけが登録されている"""
        # Act
        store = MessageStore()

        # Assert
        assert store.get_all() == []
        assert store.get_channels() == ["general"]
        assert store.max_messages == MAX_MESSAGES

    def test_add_keeps_insertion_order_and_registers_channel(self):
        """追加順に保持し、新しいチャンネルを登録する"""
        # Arrange
        store = MessageStore()

        # Act
        store.add(_text("a"))
        store.add(_text("b", channel="logs"))
        store.add(_text("c"))

        # Assert
        assert [m.content for m in store.get_all()] == ["a", "b", "c"]
        assert store.get_channels() == ["general", "logs"]

    def test_capacity_evicts_oldest(self):
        """上限を超えると最も古いメッセージから破棄する"""
        # Arrange
        store = MessageStore()

        # Act
        for i in range(MAX_MESSAGES + 5):
            store.add(_text(str(i)))

        # Assert
        contents = [m.content for m in store.get_all()]
        assert len(contents) == MAX_MESSAGES
        assert contents[0] == "5"
        assert contents[-1] == str(MAX_MESSAGES + 4)

    def test_eviction_ignores_channel(self):
        """破棄はチャンネルに関係なく全体の古い順"""
        # Arrange
        store = MessageStore(max_messages=2)

        # Act
        store.add(_text("old", channel="a"))
        store.add(_text("mid", channel="b"))
        store.add(_text("new", channel="b"))

        # Assert
        assert store.get_all("a") == []
        assert [m.content for m in store.get_all("b")] == ["mid", "new"]
        assert "a" in store.get_channels()

    def test_get_all_filters_by_channel(self):
        """チャンネル指定で絞り込む"""
        # Arrange
        store = MessageStore()
        store.add(_text("a"))
        store.add(_text("b", channel="logs"))

        # Act
        logs = store.get_all("logs")

        # Assert
        assert [m.content for m in logs] == ["b"]

    def test_snapshot_is_independent(self):
        """返したリストへの変更はストアに影響しない"""
        # Arrange
        store = MessageStore()
        store.add(_text("a"))

        # Act
        snapshot = store.get_all()
        snapshot.clear()

        # Assert
        assert len(store) == 1

    def test_clear_channel_keeps_channel_name(self):
        """チャンネル消去後もチャンネル名は残る"""
        # Arrange
        store = MessageStore()
        store.add(_text("a"))
        store.add(_text("b", channel="logs"))

        # Act
        store.clear("logs")

        # Assert
        assert [m.content for m in store.get_all()] == ["a"]
        assert store.get_channels() == ["general", "logs"]

    def test_clear_all(self):
        """チャンネル未指定なら全メッセージを消去する"""
        # Arrange
        store = MessageStore()
        store.add(_text("a"))
        store.add(_text("b", channel="logs"))

        # Act
        store.clear()

        # Assert
        assert store.get_all() == []
        assert store.get_channels() == ["general", "logs"]

    def test_clear_panels_removes_only_panel_messages(self):
        """パネル系メッセージだけを消去する"""
        # Arrange
        store = MessageStore()
        store.add(_text("a"))
        store.add(PanelMessage(kind="panel_create", panel_id="p1", panel_title="P"))
        store.add(PanelMessage(kind="panel_update", panel_id="p1", panel_content="x", channel="logs"))

        # Act
        store.clear_panels()

        # Assert
        remaining = store.get_all()
        assert len(remaining) == 1
        assert remaining[0].content == "a"

    def test_add_channel(self):
        """チャンネル名を明示的に登録できる（重複は無視）"""
        # Arrange
        store = MessageStore()

        # Act
        store.add_channel("alerts")
        store.add_channel("alerts")

        # Assert
        assert store.get_channels() == ["general", "alerts"]
