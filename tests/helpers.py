def signup_and_login(client, email="builder@example.com", password="sawdust123"):
    """Create an account through the API and return auth headers for it."""
    response = client.post("/api/signup", json={"email": email, "password": password})
    assert response.status_code == 201, response.text

    response = client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def assert_structured_reply(payload, summary=None, **expected_lists):
    """Assert the four-field reply shape and any expected values."""
    assert set(payload) == {"summary", "materials", "steps", "questions"}, f"Unexpected reply fields: {payload}"
    assert isinstance(payload["summary"], str)
    for field in ("materials", "steps", "questions"):
        assert isinstance(payload[field], list), f"'{field}' is not a list"
    if summary is not None:
        assert payload["summary"] == summary
    for field, value in expected_lists.items():
        assert payload[field] == value, f"'{field}' was {payload[field]!r}, expected {value!r}"


def assert_generic_assistant_error(response, status_code, error_type):
    """Assert an assistant failure was reported without provider details."""
    from utils.constants import ASSISTANT_UNAVAILABLE_MESSAGE

    assert response.status_code == status_code
    body = response.json()
    assert body["error"] == error_type
    assert body["message"] == ASSISTANT_UNAVAILABLE_MESSAGE
