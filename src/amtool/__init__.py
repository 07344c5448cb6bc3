"""amtool - Command-line client for the Prometheus Alertmanager API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("amtool")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for source checkouts without metadata

from .main import main, run

__all__ = ["main", "run", "__version__"]
