# src/repofetch/util/paths.py: Platform-aware path resolution.
# This module resolves where repofetch reads its configuration from and where
# transient clones are created. Config lives in the platform's user config
# directory; scratch space defaults to the system temp directory unless the
# configuration names another root.

import os
import tempfile
from pathlib import Path
from typing import Optional

import platformdirs

APP_NAME = "repofetch"


def get_config_home() -> Path:
    """Get the per-user configuration directory for the application."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_default_config_path() -> Path:
    """Get the config file path, honouring the REPOFETCH_CONFIG override."""
    override = os.environ.get("REPOFETCH_CONFIG")
    if override:
        return expand_path(override)
    return get_config_home() / "config.yaml"


def get_scratch_root(configured: Optional[Path] = None) -> Path:
    """Directory under which transient clones are allocated."""
    if configured is not None:
        return expand_path(configured)
    return Path(tempfile.gettempdir())


def expand_path(path: str | Path) -> Path:
    """Expand environment variables and user home directory in a path."""
    return Path(os.path.expandvars(os.path.expanduser(str(path)))).resolve()
