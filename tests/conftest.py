from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import config
from db import database
from db.users import insert_user

TEST_SECRET = "test-secret"
FIXED_NOW = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


def _write_test_config(config_path: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[auth]",
                f"secret_key = \"{TEST_SECRET}\"",
                "token_minutes = 60",
                "",
                "[review]",
                "max_conflict_retries = 2",
                "",
                "[database]",
                "busy_timeout_seconds = 1.0",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    """Point config and database at a temp dir and create the schema."""
    config_dir = tmp_path / ".vocabdeck"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_test_config(config_path)

    for var in (
        "VOCABDECK_SECRET_KEY",
        "VOCABDECK_TOKEN_MINUTES",
        "VOCABDECK_MAX_CONFLICT_RETRIES",
        "VOCABDECK_MAX_INTERVAL_DAYS",
        "VOCABDECK_DB_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "vocabdeck.db")

    database.init_db()
    return config_dir


@pytest.fixture
def conn(app_env):
    with database.get_conn() as connection:
        yield connection


@pytest.fixture
def make_owner(conn):
    def _make_owner(username: str) -> int:
        return insert_user(conn, username, f"{username}@example.com", "unused-hash")
    return _make_owner


@pytest.fixture
def client(app_env):
    from main import app

    return TestClient(app)


@pytest.fixture
def signup(client):
    """Sign a user up through the API and return bearer auth headers."""
    def _signup(username: str = "alice", password: str = "correct-horse") -> dict:
        response = client.post(
            "/api/auth/signup",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _signup
