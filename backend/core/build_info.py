"""Version and commit reported by ``GET /health``.

APP_VERSION and GIT_COMMIT override the installed package version and the
checkout's HEAD; both fall back to ``dev``.
"""

import functools
import os
import subprocess
from dataclasses import asdict, dataclass
from importlib import metadata

DISTRIBUTION = "numisroma"
UNKNOWN = "dev"


@dataclass(frozen=True)
class BuildInfo:
    version: str
    commit: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def _installed_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return UNKNOWN


def _head_commit() -> str:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return UNKNOWN
    return result.stdout.strip() or UNKNOWN


@functools.cache
def current_build() -> BuildInfo:
    """Resolved once per process; tests call ``current_build.cache_clear()``."""
    return BuildInfo(
        version=os.environ.get("APP_VERSION") or _installed_version(),
        commit=os.environ.get("GIT_COMMIT") or _head_commit(),
    )
