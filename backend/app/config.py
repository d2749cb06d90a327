import json
import logging
import os
from pathlib import Path
from pydantic import BaseModel, ValidationError

log = logging.getLogger(__name__)

# RECON_DATA_DIR (e.g. /data in Docker) holds config/ and the ledger;
# without it everything lives under ~/.config/reconciliation
_data_dir = os.environ.get("RECON_DATA_DIR")
CONFIG_DIR = Path(_data_dir) / "config" if _data_dir else Path.home() / ".config" / "reconciliation"
SETTINGS_FILE = CONFIG_DIR / "settings.json"
DEFAULT_DATABASE_PATH = CONFIG_DIR.parent / "ledger.db" if _data_dir else CONFIG_DIR / "ledger.db"


class ReconciliationSettings(BaseModel):
    """Runtime settings for the import and reconciliation services."""
    database_path: str = str(DEFAULT_DATABASE_PATH)

    # Candidate search window. match_window picks a named regime
    # ("primary" = 2.00 / 15 days, "strict" = 0.05 / 10 days); explicit
    # tolerance/days override it when set.
    match_window: str = "primary"
    amount_tolerance_cents: int | None = None
    window_days: int | None = None

    # Auto-accept thresholds applied to the top candidate
    preselect_threshold: int = 90
    auto_confirm_threshold: int = 95

    # Reject a file whose hash was already imported instead of deduplicating
    # its transactions
    reject_duplicate_files: bool = False

    log_level: str = "info"
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]


def ensure_config_dir() -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_settings() -> ReconciliationSettings:
    """Read settings.json; defaults when it is missing or unreadable."""
    if not SETTINGS_FILE.exists():
        return ReconciliationSettings()

    try:
        with open(SETTINGS_FILE, "r") as f:
            return ReconciliationSettings(**json.load(f))
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        log.warning("Ignoring invalid settings file %s: %s", SETTINGS_FILE, e)
        return ReconciliationSettings()


def save_settings(settings: ReconciliationSettings) -> None:
    ensure_config_dir()
    with open(SETTINGS_FILE, "w") as f:
        json.dump(settings.model_dump(mode="json"), f, indent=2)


_settings: ReconciliationSettings | None = None


def get_settings() -> ReconciliationSettings:
    """Settings loaded once per process; FastAPI dependency."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
