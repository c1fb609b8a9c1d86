import json
from pathlib import Path
from typing import Any, Optional

from hn_preview.constants import HN_API_BASE, TOP_STORY_COUNT

CONFIG_DIR = Path.home() / ".config" / "hn_preview"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULTS: dict[str, Any] = {
    "base_url": HN_API_BASE,
    "story_count": TOP_STORY_COUNT,
    "log_level": "WARNING",
}


def load_config() -> dict:
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r") as f:
            data = json.load(f)
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(key: str, value: Any):
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config = load_config()
    config[key] = value
    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2)


def get_setting(key: str, default: Optional[Any] = None) -> Any:
    """Saved value for key, falling back to the built-in default."""
    fallback = DEFAULTS.get(key) if default is None else default
    return load_config().get(key, fallback)
