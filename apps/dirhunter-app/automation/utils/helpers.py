"""
Helper utilities for DirHunter.
"""

import os
import platform
import re
from datetime import datetime
from pathlib import Path


def get_app_data_directory() -> Path:
    """
    Get a writable directory for app data based on platform.
    This is used for databases, screenshots, logs and the stop signal file.

    - macOS: ~/Library/Application Support/com.dirhunter.app
    - Windows: %APPDATA%/com.dirhunter.app
    - Linux: $XDG_DATA_HOME/com.dirhunter.app (default ~/.local/share)

    DIRHUNTER_DATA_DIR overrides the platform location.
    """
    override = os.environ.get("DIRHUNTER_DATA_DIR")
    if override:
        data_dir = Path(override)
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    system = platform.system()
    app_id = "com.dirhunter.app"

    if system == "Darwin":  # macOS
        data_dir = Path.home() / "Library" / "Application Support" / app_id
    elif system == "Windows":
        app_data = os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming")
        data_dir = Path(app_data) / app_id
    else:  # Linux and others
        xdg_data = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_dir = Path(xdg_data) / app_id

    # Ensure directory exists
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def sanitize_filename(name: str, default: str = "file") -> str:
    """Replace anything but letters, digits, dash and underscore."""
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", name or "").strip("_")
    return safe or default


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with a trailing Z."""
    return datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
