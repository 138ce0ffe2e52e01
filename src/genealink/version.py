"""Version report for ``genealink version``.

The package version lives in ``genealink.__version__``. When the package is
installed, the distribution metadata should agree with it; an editable
install left behind after a version bump is reported as stale.
"""

import importlib.metadata
import platform

from genealink import __version__
from genealink.config import Config, get_config

DISTRIBUTION = "genealink"


def installed_version() -> str | None:
    """Version recorded in the installed distribution, None when not installed."""
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return None


def get_version_info(config: Config | None = None) -> dict[str, str | None]:
    config = config or get_config()
    installed = installed_version()

    if installed is None:
        source = "source tree"
    elif installed == __version__:
        source = "installed"
    else:
        source = "stale install"

    return {
        "version": __version__,
        "installed": installed,
        "source": source,
        "python": platform.python_version(),
        "register": config.database_path,
    }


def format_version_string(config: Config | None = None) -> str:
    """Version, install state and the register the CLI would open."""
    info = get_version_info(config)
    lines = [
        f"GeneaLink {info['version']} ({info['source']})",
        f"Python {info['python']}",
        f"Register: {info['register']}",
    ]
    if info["source"] == "stale install":
        lines.append(f"Installed metadata reports {info['installed']}; reinstall the package")
    return "\n".join(lines)
