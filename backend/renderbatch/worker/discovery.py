"""
Render executable discovery.

Locates the host's command-line renderer (aerender).

Discovery priority:
1. Environment variable override (RENDERBATCH_AERENDER_PATH)
2. Executable next to the host application (app_package)
3. PATH lookup
4. Platform-specific default install locations
"""

import glob
import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from .errors import WorkerNotFoundError


ENV_AERENDER_PATH = "RENDERBATCH_AERENDER_PATH"


def executable_name() -> str:
    """Binary name on the current platform."""
    return "aerender.exe" if sys.platform == "win32" else "aerender"


def discover_aerender(app_package: Optional[str] = None) -> str:
    """
    Find the command-line render executable.

    Args:
        app_package: Host application folder. When given, the executable
            next to the host binary is preferred over PATH lookup.

    Returns:
        Absolute path to the executable

    Raises:
        WorkerNotFoundError: If no executable can be found
    """
    override_path = os.environ.get(ENV_AERENDER_PATH)
    if override_path:
        if not Path(override_path).is_file():
            raise WorkerNotFoundError(
                f"Override path from {ENV_AERENDER_PATH} does not exist: {override_path}"
            )
        return override_path

    if app_package:
        candidate = Path(app_package) / executable_name()
        if candidate.is_file():
            return str(candidate)

    found = shutil.which(executable_name())
    if found:
        return found

    for candidate in _default_locations():
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate

    raise WorkerNotFoundError(
        f"{executable_name()} not found. "
        f"Set {ENV_AERENDER_PATH} environment variable if installed elsewhere."
    )


def _default_locations() -> List[str]:
    """Default install locations, newest host version first."""
    if sys.platform == "darwin":
        pattern = "/Applications/Adobe After Effects */aerender"
    elif sys.platform == "win32":
        program_files = os.environ.get("PROGRAMFILES", "C:\\Program Files")
        pattern = os.path.join(
            program_files, "Adobe", "Adobe After Effects *", "Support Files", "aerender.exe"
        )
    else:
        return []
    return sorted(glob.glob(pattern), reverse=True)
