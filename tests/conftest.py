"""
Общие фикстуры для тестов
"""

import json

import httpx
import pytest

from amocrm_sdk.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Настройки из окружения теста, без .env разработчика"""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AMOCRM_SUBDOMAIN", "example")
    monkeypatch.setenv("AMOCRM_ACCESS_TOKEN", "test-access-token")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def recorded_requests():
    """Список запросов, прошедших через мок-транспорт"""
    return []


@pytest.fixture
def mock_transport(recorded_requests):
    """Фабрика MockTransport, отдающего заданный ответ"""
    def _make(status_code=200, payload=None, content=None):
        def handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            if content is not None:
                return httpx.Response(status_code, content=content)
            if payload is None:
                return httpx.Response(status_code)
            return httpx.Response(
                status_code,
                content=json.dumps(payload).encode(),
                headers={"Content-Type": "application/json"}
            )
        return httpx.MockTransport(handler)
    return _make
