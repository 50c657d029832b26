"""
Application settings and environment loading.

Settings live in ~/.axis/settings.yaml. Credentials never go here; they
belong to the vault.
"""

from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".axis"
SETTINGS_FILENAME = "settings.yaml"


@dataclass
class AppSettings:
    """Persistent application settings."""
    data_dir: str = str(DEFAULT_DATA_DIR)
    workspace_root: str = str(Path.home() / "Documents" / "Axis-Workspace")
    pages_dirname: str = "pages"
    env_file: str = ".env"
    log_level: str = "INFO"

    @property
    def credentials_path(self) -> Path:
        return Path(self.data_dir).expanduser() / "credentials.db"

    @classmethod
    def from_dict(cls, data: dict) -> AppSettings:
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in (data or {}).items():
            if key in known:
                # A bare "key:" in YAML means "use the default"
                if value is None:
                    continue
                values[key] = str(value)
            else:
                logger.debug(f"Ignoring unknown setting: {key}")
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


def _settings_path(path: Optional[Path]) -> Path:
    return Path(path) if path else DEFAULT_DATA_DIR / SETTINGS_FILENAME


def get_settings(path: Path = None) -> AppSettings:
    """
    Load settings, falling back to defaults.

    A missing or malformed file yields defaults; the error is logged.
    """
    settings_file = _settings_path(path)
    if not settings_file.exists():
        return AppSettings()

    try:
        with open(settings_file) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to read settings {settings_file}: {e}")
        return AppSettings()

    if not isinstance(data, dict):
        logger.warning(f"Settings file {settings_file} is not a mapping, using defaults")
        return AppSettings()

    return AppSettings.from_dict(data)


def save_settings(settings: AppSettings, path: Path = None) -> bool:
    """Write settings to disk. Returns True on success."""
    settings_file = _settings_path(path)
    try:
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_file, "w") as f:
            yaml.safe_dump(settings.to_dict(), f, default_flow_style=False, sort_keys=True)
    except OSError as e:
        logger.error(f"Failed to save settings to {settings_file}: {e}")
        return False
    logger.debug(f"Settings saved to {settings_file}")
    return True


def load_env(path: Path = None) -> bool:
    """
    Load AXIS_* developer defaults from a .env file.

    Variables already set in the process environment are never
    overwritten. Safe to call more than once.

    Args:
        path: .env file (defaults to ./.env in the working directory)

    Returns:
        True if a file was found and loaded
    """
    env_path = Path(path) if path else Path.cwd() / ".env"
    try:
        if not env_path.is_file():
            return False
        return load_dotenv(env_path, override=False)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to load {env_path}: {e}")
        return False
