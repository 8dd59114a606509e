"""設定管理モジュールのテスト"""

from pathlib import Path

from displayhub.core.config import (
    DEFAULT_PORT,
    DisplayHubSettings,
    get_settings,
    reload_settings,
)


class TestDisplayHubSettings:
    """DisplayHubSettings のテスト"""

    def test_default_values(self):
        """デフォルト値が正しく設定される"""
        # Arrange & Act
        settings = DisplayHubSettings()

        # Assert
        assert settings.server.host == "127.0.0.1"
        assert settings.get_port() == DEFAULT_PORT == 7890
        assert settings.hub.max_messages == 200
        assert settings.hub.response_timeout_seconds == 300.0
        assert settings.logging.level == "INFO"

    def test_from_yaml_with_valid_file(self, tmp_path):
        """有効なYAMLファイルから設定を読み込む"""
        # Arrange
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            """
server:
  port: 9100
hub:
  max_messages: 50
  response_timeout_seconds: 30
logging:
  level: DEBUG
"""
        )

        # Act
        settings = DisplayHubSettings.from_yaml(config_file)

        # Assert
        assert settings.get_port() == 9100
        assert settings.hub.max_messages == 50
        assert settings.hub.response_timeout_seconds == 30.0
        assert settings.logging.level == "DEBUG"

    def test_from_yaml_searches_working_directory(self, tmp_path):
        """config_path が None ならカレントディレクトリの設定ファイルを探す"""
        # Arrange: conftest で cwd は tmp_path
        (tmp_path / "display-hub.config.yaml").write_text("server:\n  port: 9200\n")

        # Act
        settings = DisplayHubSettings.from_yaml(None)

        # Assert
        assert settings.get_port() == 9200

    def test_from_yaml_with_nonexistent_file(self):
        """存在しないファイルパスを指定した場合はデフォルト値"""
        # Act
        settings = DisplayHubSettings.from_yaml(Path("/nonexistent/config.yaml"))

        # Assert
        assert settings.get_port() == DEFAULT_PORT

    def test_display_port_env_overrides_default(self, monkeypatch):
        """DISPLAY_PORT でポートを上書きできる"""
        # Arrange
        monkeypatch.setenv("DISPLAY_PORT", "8123")

        # Act
        settings = DisplayHubSettings()

        # Assert
        assert settings.get_port() == 8123

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """環境変数はYAMLより優先される"""
        # Arrange
        config_file = tmp_path / "display-hub.config.yaml"
        config_file.write_text("server:\n  port: 9300\n")
        monkeypatch.setenv("DISPLAY_PORT", "9400")

        # Act
        settings = DisplayHubSettings.from_yaml(config_file)

        # Assert
        assert settings.server.port == 9300
        assert settings.get_port() == 9400

    def test_nested_env_override(self, monkeypatch):
        """ネストした設定も __ 区切りの環境変数で上書きできる"""
        # Arrange
        monkeypatch.setenv("DISPLAY_HUB__MAX_MESSAGES", "10")

        # Act
        settings = DisplayHubSettings()

        # Assert
        assert settings.hub.max_messages == 10


class TestGetSettings:
    """get_settings / reload_settings のテスト"""

    def test_get_settings_returns_singleton(self):
        """同じインスタンスを返す"""
        assert get_settings() is get_settings()

    def test_reload_settings_replaces_singleton(self, tmp_path):
        """再読み込みで新しい設定に置き換わる"""
        # Arrange
        before = get_settings()
        config_file = tmp_path / "reload.yaml"
        config_file.write_text("hub:\n  max_messages: 7\n")

        # Act
        after = reload_settings(config_file)

        # Assert
        assert after is not before
        assert get_settings().hub.max_messages == 7
