import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".vocabdeck"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_SECRET_KEY = "change-me"
DEFAULT_TOKEN_MINUTES = 24 * 60
DEFAULT_MAX_CONFLICT_RETRIES = 3
DEFAULT_MAX_INTERVAL_DAYS = 36500
DEFAULT_BUSY_TIMEOUT_SECONDS = 5.0


def load_config() -> Dict[str, Any]:
    """Load config from ~/.vocabdeck/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., VOCABDECK_SECRET_KEY)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    auth_cfg = config.get("auth", {})
    config["auth"] = {
        "secret_key": os.getenv("VOCABDECK_SECRET_KEY", auth_cfg.get("secret_key", DEFAULT_SECRET_KEY)),
        "token_minutes": int(os.getenv(
            "VOCABDECK_TOKEN_MINUTES",
            auth_cfg.get("token_minutes", DEFAULT_TOKEN_MINUTES)
        )),
    }
    review_cfg = config.get("review", {})
    config["review"] = {
        "max_conflict_retries": int(os.getenv(
            "VOCABDECK_MAX_CONFLICT_RETRIES",
            review_cfg.get("max_conflict_retries", DEFAULT_MAX_CONFLICT_RETRIES)
        )),
        "max_interval_days": int(os.getenv(
            "VOCABDECK_MAX_INTERVAL_DAYS",
            review_cfg.get("max_interval_days", DEFAULT_MAX_INTERVAL_DAYS)
        )),
    }
    database_cfg = config.get("database", {})
    config["database"] = {
        "busy_timeout_seconds": float(os.getenv(
            "VOCABDECK_DB_TIMEOUT",
            database_cfg.get("busy_timeout_seconds", DEFAULT_BUSY_TIMEOUT_SECONDS)
        )),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('auth', 'token_minutes')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
