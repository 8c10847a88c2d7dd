from pathlib import Path

import pytest

import config


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    config_dir = tmp_path / ".vocabdeck"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_dir / "config.toml")
    for var in (
        "VOCABDECK_SECRET_KEY",
        "VOCABDECK_TOKEN_MINUTES",
        "VOCABDECK_MAX_CONFLICT_RETRIES",
        "VOCABDECK_MAX_INTERVAL_DAYS",
        "VOCABDECK_DB_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    return config_dir


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_example_config_is_copied_on_first_load(config_home):
    loaded = config.load_config()

    assert (config_home / "config.toml").exists()
    assert loaded["auth"]["token_minutes"] == config.DEFAULT_TOKEN_MINUTES
    assert loaded["review"]["max_conflict_retries"] == config.DEFAULT_MAX_CONFLICT_RETRIES
    assert loaded["review"]["max_interval_days"] == config.DEFAULT_MAX_INTERVAL_DAYS
    assert loaded["database"]["busy_timeout_seconds"] == config.DEFAULT_BUSY_TIMEOUT_SECONDS


def test_missing_sections_fall_back_to_defaults(config_home):
    _write_config(config_home / "config.toml", "[auth]\nsecret_key = \"s3cret\"\n")

    loaded = config.load_config()

    assert loaded["auth"] == {"secret_key": "s3cret", "token_minutes": config.DEFAULT_TOKEN_MINUTES}
    assert config.get_config_value("review", "max_conflict_retries") == config.DEFAULT_MAX_CONFLICT_RETRIES
    assert config.get_config_value("review", "missing", "fallback") == "fallback"


def test_environment_overrides_file(config_home, monkeypatch):
    _write_config(
        config_home / "config.toml",
        "[auth]\nsecret_key = \"from-file\"\ntoken_minutes = 30\n\n[review]\nmax_conflict_retries = 1\n",
    )
    monkeypatch.setenv("VOCABDECK_SECRET_KEY", "from-env")
    monkeypatch.setenv("VOCABDECK_MAX_CONFLICT_RETRIES", "7")
    monkeypatch.setenv("VOCABDECK_DB_TIMEOUT", "0.5")

    loaded = config.load_config()

    assert loaded["auth"]["secret_key"] == "from-env"
    assert loaded["auth"]["token_minutes"] == 30
    assert loaded["review"]["max_conflict_retries"] == 7
    assert loaded["database"]["busy_timeout_seconds"] == 0.5
