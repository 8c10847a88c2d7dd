from fastapi.testclient import TestClient

from routes import cards as card_routes
from utils.errors import ERROR_RESPONSES, ErrorKind, TransientError


def test_every_error_kind_has_a_response():
    assert set(ERROR_RESPONSES) == set(ErrorKind)
    assert ERROR_RESPONSES[TransientError().kind][0] == 503


def test_unexpected_error_hides_internal_detail(app_env, signup, monkeypatch):
    from main import app

    headers = signup("alice")

    def broken_count(conn, owner_id):
        raise RuntimeError("sqlite internals: table cards is corrupt")

    monkeypatch.setattr(card_routes, "count_cards", broken_count)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/v1/vocabulary/count", headers=headers)

    assert response.status_code == 500
    problem = response.json()
    assert problem["detail"] == "An unexpected error occurred"
    assert problem["title"] == "Internal Server Error"
    assert "corrupt" not in response.text
