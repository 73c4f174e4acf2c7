# src/build_assembler/errors.py
"""Exception taxonomy for the assembler.

Generator and fetch failures subclass ``OSError`` so callers can treat them
as the I/O failures they are; configuration problems subclass ``ValueError``
so the CLI reports them as controlled termination.
"""


class AssemblerError(Exception):
    """Base class for every error raised by this package."""


class CodeGenerationError(AssemblerError, OSError):
    """An external generator command could not be launched or failed."""


class ExecutableResolutionError(CodeGenerationError):
    """The builder executable for a generator could not be located."""


class WheelFetchError(AssemblerError, OSError):
    """A remote archive could not be downloaded or unpacked."""


class RetryExhaustedError(AssemblerError):
    """Every attempt allowed by a retry policy failed."""

    def __init__(self, label: str, failures: list[BaseException]) -> None:
        self.label = label
        self.failures = failures
        super().__init__(f"{label} failed after {len(failures)} attempt(s)")


class ConfigError(AssemblerError, ValueError):
    """Invalid configuration."""


class ManifestError(ConfigError):
    """Invalid registration manifest."""
