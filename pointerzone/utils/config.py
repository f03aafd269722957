import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_DIR = Path(
    os.environ.get("POINTERZONE_CONFIG_DIR", str(Path.home() / ".local/share/pointerzone"))
)
DEFAULT_EVENTS = Path(
    os.environ.get("POINTERZONE_EVENTS", str(DEFAULT_CONFIG_DIR / "events.jsonl"))
)

# Control API network settings
WEB_HOST = os.environ.get("POINTERZONE_WEB_HOST", "127.0.0.1")
WEB_PORT = int(os.environ.get("POINTERZONE_WEB_PORT", "8788"))

# Remote icon fetch timeout (seconds)
ICON_TIMEOUT = float(os.environ.get("POINTERZONE_ICON_TIMEOUT", "10"))


@dataclass
class Settings:
    config_dir: Path = DEFAULT_CONFIG_DIR
    events_path: Path = DEFAULT_EVENTS
    log_level: str = os.environ.get("POINTERZONE_LOGLEVEL", "INFO")
    web_host: str = WEB_HOST
    web_port: int = WEB_PORT
    icon_timeout: float = ICON_TIMEOUT


SETTINGS = Settings()
