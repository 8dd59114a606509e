"""display-hub 設定管理モジュール

Pydantic Settingsを使用した型安全な設定管理。
display-hub.config.yaml と環境変数から設定を読み込む。
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 7890


class CORSConfig(BaseModel):
    """CORS設定"""

    enabled: bool = Field(default=True, description="CORSヘッダーを付与するか")
    allow_origins: list[str] = Field(default=["*"], description="許可するオリジン")
    allow_methods: list[str] = Field(default=["GET", "POST", "OPTIONS"])
    allow_headers: list[str] = Field(default=["Content-Type"])


class ServerConfig(BaseModel):
    """サーバー設定"""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535, description="0 の場合は空きポート")
    cors: CORSConfig = Field(default_factory=CORSConfig)


class HubConfig(BaseModel):
    """Hub設定"""

    max_messages: int = Field(default=200, ge=1, description="保持するメッセージ数の上限")
    response_timeout_seconds: float = Field(
        default=300.0, gt=0, description="ユーザー応答待ちのデフォルトタイムアウト秒"
    )
    relay_timeout_seconds: float = Field(
        default=5.0, gt=0, description="リレー転送リクエストのタイムアウト秒"
    )
    shutdown_timeout_seconds: float = Field(
        default=5.0, gt=0, description="停止時にサーバー終了を待つ秒数"
    )
    dashboard_path: str | None = Field(
        default=None, description="ダッシュボードHTMLのパス（未設定時は同梱ファイル）"
    )


class LoggingConfig(BaseModel):
    """ロギング設定"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class DisplayHubSettings(BaseSettings):
    """display-hub 全体設定

    設定の優先順位:
    1. 環境変数 (DISPLAY_ プレフィックス、ネストは __ 区切り)
    2. display-hub.config.yaml
    3. デフォルト値
    """

    model_config = SettingsConfigDict(
        env_prefix="DISPLAY_",
        env_nested_delimiter="__",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    hub: HubConfig = Field(default_factory=HubConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    # DISPLAY_PORT による上書き
    port: int | None = Field(default=None, ge=0, le=65535)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # 環境変数をYAML由来の初期値より優先する
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, config_path: Path | str | None = None) -> "DisplayHubSettings":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス。Noneの場合はデフォルトパスを探索

        Returns:
            DisplayHubSettings インスタンス
        """
        if config_path is None:
            search_paths = [
                Path.cwd() / "display-hub.config.yaml",
                Path.cwd() / "display-hub.config.yml",
                Path.home() / ".display-hub" / "config.yaml",
            ]
            for path in search_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path and Path(config_path).exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
            return cls(**yaml_config)

        return cls()

    def get_port(self) -> int:
        """待ち受けポートを取得（DISPLAY_PORT を優先）"""
        if self.port is not None:
            return self.port
        return self.server.port


# グローバル設定インスタンス（遅延初期化）
_settings: DisplayHubSettings | None = None


def get_settings() -> DisplayHubSettings:
    """設定シングルトンを取得"""
    global _settings
    if _settings is None:
        _settings = DisplayHubSettings.from_yaml()
    return _settings


def reload_settings(config_path: Path | str | None = None) -> DisplayHubSettings:
    """設定を再読み込み"""
    global _settings
    _settings = DisplayHubSettings.from_yaml(config_path)
    return _settings
