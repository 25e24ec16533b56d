"""
Test configuration and fixtures for Student Gateway tests
"""
import json
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from student_gateway.main import create_app
from student_gateway.core.config import Settings
from student_gateway.services.backend_client import BackendClient
from student_gateway.services.dispatcher import ActionDispatcher
from student_gateway.monitoring.structured_logger import StructuredLogger
from student_gateway.preferences import InMemoryKeyValueStore, PreferenceStore

BACKEND_URL = "http://mock-backend:8000"

class FakeBackend:
    """Scripted backend service behind an httpx.MockTransport"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._replies: Dict[str, Dict[str, Any]] = {}

    def reply(self, path: str, status_code: int = 200, json_body: Any = None,
              content: Optional[bytes] = None) -> None:
        self._replies[path] = {"status_code": status_code, "json": json_body, "content": content}

    def fail(self, path: str, exc_factory: Callable[[httpx.Request], Exception]) -> None:
        self._replies[path] = {"raise": exc_factory}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        scripted = self._replies.get(request.url.path)
        if scripted is None:
            return httpx.Response(200, json={"success": True})
        if "raise" in scripted:
            raise scripted["raise"](request)
        if scripted["content"] is not None:
            return httpx.Response(scripted["status_code"], content=scripted["content"])
        return httpx.Response(scripted["status_code"], json=scripted["json"])

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)

@pytest.fixture
def test_settings():
    """Settings for the testing environment"""
    return Settings(
        environment="testing",
        backend_url=BACKEND_URL,
        enable_swagger_ui=True,
    )

@pytest.fixture
def dev_settings():
    """Settings for the development environment"""
    return Settings(
        environment="development",
        backend_url=BACKEND_URL,
    )

@pytest.fixture
def mock_logger():
    """Mock structured logger"""
    logger = MagicMock(spec=StructuredLogger)
    logger._get_timestamp.return_value = "2024-01-15T10:30:00+00:00"
    return logger

@pytest.fixture
def fake_backend():
    return FakeBackend()

@pytest.fixture
def backend_client(test_settings, mock_logger, fake_backend):
    """Backend client wired to the fake backend"""
    return BackendClient(test_settings, mock_logger, transport=fake_backend.transport)

@pytest.fixture
def dispatcher(backend_client, mock_logger):
    return ActionDispatcher(backend_client, mock_logger)

def _client_for(app, settings, logger, fake_backend):
    with TestClient(app) as client:
        # Swap the lifespan's real backend client for one on the fake transport
        scripted_client = BackendClient(settings, logger, transport=fake_backend.transport)
        app.state.backend_client = scripted_client
        app.state.dispatcher = ActionDispatcher(scripted_client, logger)
        yield client

@pytest.fixture
def app(test_settings, mock_logger):
    return create_app(test_settings, mock_logger)

@pytest.fixture
def client(app, test_settings, mock_logger, fake_backend):
    """Test client for the API with the backend scripted by fake_backend"""
    yield from _client_for(app, test_settings, mock_logger, fake_backend)

@pytest.fixture
def dev_client(dev_settings, mock_logger, fake_backend):
    """Test client running in the development environment"""
    dev_app = create_app(dev_settings, mock_logger)
    yield from _client_for(dev_app, dev_settings, mock_logger, fake_backend)

@pytest.fixture
def profile_store():
    """Durable profile channel"""
    return InMemoryKeyValueStore()

@pytest.fixture
def session_store():
    """Ephemeral session channel"""
    return InMemoryKeyValueStore()

@pytest.fixture
def preference_store(profile_store, session_store, mock_logger):
    return PreferenceStore(profile_store, session_store, mock_logger)
