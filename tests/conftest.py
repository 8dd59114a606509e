"""display-hub テスト設定"""

import os

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from displayhub.core import config as config_module
from displayhub.core.config import DisplayHubSettings, ServerConfig
from displayhub.hub import Hub


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """環境変数・設定ファイル・設定シングルトンの影響を受けないようにする"""
    for key in list(os.environ):
        if key.startswith("DISPLAY_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_settings", None)
    yield


@pytest.fixture
def settings():
    """テスト用の設定（空きポートを使う）"""
    return DisplayHubSettings(server=ServerConfig(host="127.0.0.1", port=0))


@pytest.fixture
def hub(settings):
    """起動していないHub（TestClient 経由で使う）"""
    return Hub(settings)


@pytest.fixture
def client(hub):
    """テスト用FastAPIクライアント"""
    with TestClient(hub.app) as client:
        yield client


@pytest_asyncio.fixture
async def running_hub(settings):
    """実ソケットで起動したHub"""
    hub = Hub(settings)
    await hub.start()
    try:
        yield hub
    finally:
        await hub.stop()
