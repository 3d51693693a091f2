"""Package metadata and naming constants."""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

PACKAGE_NAME = "deptrac"

try:
    __version__ = version(PACKAGE_NAME)
except PackageNotFoundError:
    # Running from a source checkout that was never installed
    __version__ = "0.0.0.dev0"

VERSION = __version__

# Configuration namespace handled by DeptracExtension
EXTENSION_ALIAS = "deptrac"

# Cache artifact created in the working directory unless overridden
DEFAULT_CACHE_FILE = ".deptrac.cache"

# Built-in service definitions shipped with the package
INTERNAL_CONFIG_PATH = Path(__file__).parent / "resources" / "config"
