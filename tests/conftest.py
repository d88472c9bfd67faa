import pytest

from config import Config


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Fast, deterministic identity settings for every test."""
    monkeypatch.setattr(Config, "JWT_SECRET", "test-secret")
    monkeypatch.setattr(Config, "PASSWORD_HASH_ITERATIONS", 1000)
    monkeypatch.setattr(Config, "TOKEN_TTL_SECONDS", 3600)


@pytest.fixture
def store(tmp_path):
    """JsonStore backed by a temporary file."""
    from utils.store import JsonStore
    return JsonStore(str(tmp_path / "db.json"))


@pytest.fixture
def stub_model_client():
    """Model client stub; tests append canned replies to .responses."""
    from tests.fixtures.mock_clients import StubModelClient
    return StubModelClient()


@pytest.fixture
def assistant(stub_model_client):
    """AssistantService wired to the stub model client."""
    from services.assistant_service import AssistantService
    return AssistantService(stub_model_client)


@pytest.fixture
def ollama_client_builder():
    from tests.fixtures.mock_clients import OllamaClientBuilder
    return OllamaClientBuilder()


@pytest.fixture
def configured_app(store, assistant):
    """Pre-configured app with a temporary store and a stubbed assistant."""
    from fastapi.testclient import TestClient
    from main import app
    from utils.store import set_store

    set_store(store)
    app.state.assistant = assistant

    with TestClient(app) as client:
        yield client

    app.state.assistant = None
    set_store(None)


@pytest.fixture
def auth_headers(configured_app):
    """Authentication headers for a freshly registered user."""
    from tests.helpers import signup_and_login
    return signup_and_login(configured_app)
