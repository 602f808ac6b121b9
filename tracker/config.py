"""Runtime settings: defaults, then ~/.finance-tracker/config.json, then env vars."""
import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

CONFIG_DIR = Path.home() / ".finance-tracker"
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_PREFIX = "FINANCE_TRACKER_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: str = str(CONFIG_DIR / "data")
    currency_symbol: str = "₹"
    default_window: str = "6months"
    log_level: str = "INFO"


_ENV_FIELDS = {
    "DATA_DIR": "data_dir",
    "CURRENCY": "currency_symbol",
    "WINDOW": "default_window",
    "LOG_LEVEL": "log_level",
}


def load_config(path: Path = CONFIG_FILE) -> dict:
    """Returns {} on missing or corrupt file, never raises."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    environ = os.environ if environ is None else environ
    settings = Settings()

    file_values = load_config(path or CONFIG_FILE)
    known = {k: str(v) for k, v in file_values.items() if k in Settings.__dataclass_fields__}
    settings = replace(settings, **known)

    env_values = {
        field: environ[ENV_PREFIX + suffix]
        for suffix, field in _ENV_FIELDS.items()
        if environ.get(ENV_PREFIX + suffix)
    }
    return replace(settings, **env_values)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def format_currency(amount: float, symbol: str = "₹") -> str:
    """Format a float as currency string, e.g. '₹1,234.56'."""
    return f"{symbol}{amount:,.2f}"


def format_signed(amount: float, symbol: str = "₹") -> str:
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{symbol}{abs(amount):,.2f}"
