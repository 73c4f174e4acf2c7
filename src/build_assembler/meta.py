# src/build_assembler/meta.py
"""Program identity used for logging, env vars and config discovery."""

from importlib.metadata import PackageNotFoundError, version
from typing import NamedTuple


PROGRAM_PACKAGE = "build_assembler"
PROGRAM_SCRIPT = "build-assembler"
PROGRAM_DISPLAY = "Build Assembler"
PROGRAM_ENV = "BUILD_ASSEMBLER"
PROGRAM_CONFIG = "build_assembler"


class Metadata(NamedTuple):
    version: str
    distribution: str


def get_metadata() -> Metadata:
    """Return the installed version, or "unknown" when running from source."""
    try:
        return Metadata(version(PROGRAM_SCRIPT), PROGRAM_SCRIPT)
    except PackageNotFoundError:
        return Metadata("unknown", PROGRAM_SCRIPT)
