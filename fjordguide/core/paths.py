"""
Path Utility Module.
Handles resource path resolution for both development and bundled environments.
Also manages user data directories for persistent storage.
"""

import os
import sys
from pathlib import Path

APP_DIRNAME = "FjordGuide"
RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"


def get_resource_path(relative_path: str) -> str:
    """
    Resolves the absolute path to a bundled resource file.
    Works for both an installed package and a PyInstaller bundle.

    Args:
        relative_path: Path relative to the package resources directory.

    Returns:
        str: The absolute path to the resource.
    """
    # PyInstaller creates a temp folder and stores path in _MEIPASS
    bundle_dir = getattr(sys, "_MEIPASS", None)
    if bundle_dir:
        return os.path.join(bundle_dir, "fjordguide", "resources", relative_path)
    return str(RESOURCES_DIR / relative_path)


def get_user_data_path(filename: str = "") -> str:
    """
    Returns the absolute path to a file in the user's application data directory.
    Creates the directory if it doesn't exist.

    Args:
        filename: Optional filename to append to the directory path.

    Returns:
        str: Absolute path to the user data directory or file.
    """
    if sys.platform == "win32":
        base_dir = Path(
            os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        )
    elif sys.platform == "darwin":
        base_dir = Path(os.path.expanduser("~/Library/Application Support"))
    else:
        base_dir = Path(
            os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
        )

    data_dir = base_dir / APP_DIRNAME
    data_dir.mkdir(parents=True, exist_ok=True)

    if filename:
        return str(data_dir / filename)
    return str(data_dir)
