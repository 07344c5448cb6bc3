"""Build and version information for the version banner."""

import platform
import sys
from dataclasses import dataclass

from . import __version__

# Overwritten by release builds.
BRANCH = ""
REVISION = "unknown"
BUILD_USER = ""
BUILD_DATE = ""
TAGS = "unknown"


@dataclass(frozen=True)
class BuildInfo:
    """Build metadata printed by ``--version``."""

    version: str
    branch: str
    revision: str
    build_user: str
    build_date: str
    python_version: str
    platform: str
    tags: str


def get_build_info() -> BuildInfo:
    """Collect build metadata for the running interpreter."""
    return BuildInfo(
        version=__version__,
        branch=BRANCH,
        revision=REVISION,
        build_user=BUILD_USER,
        build_date=BUILD_DATE,
        python_version=platform.python_version(),
        platform=f"{sys.platform}/{platform.machine()}",
        tags=TAGS,
    )


def format_version(program: str, info: BuildInfo | None = None) -> str:
    """Render the multi-line version banner.

    Args:
        program: Program name shown on the first line
        info: Build metadata, defaults to the running build

    Returns:
        Banner text ending with a newline
    """
    info = info or get_build_info()
    return (
        f"{program}, version {info.version} (branch: {info.branch}, revision: {info.revision})\n"
        f"  build user:       {info.build_user}\n"
        f"  build date:       {info.build_date}\n"
        f"  python version:   {info.python_version}\n"
        f"  platform:         {info.platform}\n"
        f"  tags:             {info.tags}\n"
    )
