import os
from pathlib import Path

import yaml

from .core.errors import ValidationError

MINDER_DIR = Path(os.environ.get("MINDER_HOME", Path.home() / ".minder"))
DB_PATH = MINDER_DIR / "minder.db"
CONFIG_PATH = MINDER_DIR / "config.yaml"
BACKUP_DIR = MINDER_DIR / "backups"

DEFAULT_LOOKBACK_DAYS = 365
DEFAULT_PERIOD = "7d"
DEFAULT_LOG_LEVEL = "WARNING"


class Config:
    """Single-instance config manager. Load once, cache in memory."""

    _instance: "Config | None" = None
    _data: dict[str, object]

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
            cls._instance._load()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next access re-reads CONFIG_PATH."""
        cls._instance = None

    def _load(self) -> None:
        if not CONFIG_PATH.exists():
            self._data = {}
            return
        with CONFIG_PATH.open() as f:
            loaded = yaml.safe_load(f)
        self._data = loaded if isinstance(loaded, dict) else {}

    def _save(self) -> None:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        with CONFIG_PATH.open("w") as f:
            yaml.dump(self._data, f, default_flow_style=False, allow_unicode=True)

    def get(self, key: str, default: object = None) -> object:
        return self._data.get(key, default)

    def set(self, key: str, value: object) -> None:
        self._data[key] = value
        self._save()


def get_lookback_days() -> int:
    """How many days back streaks are searched (365 unless configured)."""
    val = Config().get("lookback_days")
    try:
        days = int(val) if val is not None else DEFAULT_LOOKBACK_DAYS
    except (TypeError, ValueError):
        return DEFAULT_LOOKBACK_DAYS
    return days if days > 0 else DEFAULT_LOOKBACK_DAYS


def get_default_period() -> str:
    val = Config().get("default_period")
    return str(val).strip() if val else DEFAULT_PERIOD


def get_log_level() -> str:
    env = os.environ.get("MINDER_LOG_LEVEL")
    if env:
        return env.upper()
    val = Config().get("log_level")
    return str(val).upper() if val else DEFAULT_LOG_LEVEL


CONFIG_KEYS = ("lookback_days", "default_period", "log_level")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def set_value(key: str, raw: str) -> object:
    """Validate and persist one config key, returning the stored value."""
    value: object
    if key == "lookback_days":
        if not raw.isdigit() or int(raw) <= 0:
            raise ValidationError(f"lookback_days must be a positive integer, got '{raw}'")
        value = int(raw)
    elif key == "log_level":
        value = raw.upper()
        if value not in _LOG_LEVELS:
            raise ValidationError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
    elif key == "default_period":
        value = raw.strip()
    else:
        raise ValidationError(f"unknown config key '{key}' (expected {', '.join(CONFIG_KEYS)})")
    Config().set(key, value)
    return value
