# src/build_assembler/runner.py
"""Run opaque code generator commands from the build root.

Commands arrive as single strings produced by the build graph walker. They
are split with shell quoting rules and executed without a shell.
"""

import shlex
import subprocess
from pathlib import Path

from .constants import DEFAULT_BUILD_TOOL
from .errors import CodeGenerationError, ExecutableResolutionError
from .logs import AppLogger, get_logger


def run_generator_command(
    command: str,
    working_root: Path | str,
    *,
    logger: AppLogger | None = None,
) -> str:
    """Run ``command`` with ``working_root`` as its working directory.

    Returns:
        The command's stdout.

    Raises:
        CodeGenerationError: the command is empty, cannot be launched, or
            exits with a non-zero status.
    """
    logger = logger or get_logger()
    try:
        argv = shlex.split(command)
    except ValueError as e:
        xmsg = f"Cannot parse generator command `{command}`: {e}"
        raise CodeGenerationError(xmsg) from e
    if not argv:
        xmsg = "Empty generator command"
        raise CodeGenerationError(xmsg)

    logger.trace("[RUN] %s (cwd=%s)", command, working_root)
    try:
        result = subprocess.run(  # noqa: S603
            argv,
            cwd=working_root,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        xmsg = f"Cannot launch `{command}`: {e}"
        raise CodeGenerationError(xmsg) from e

    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip()
        xmsg = f"`{command}` exited with code {result.returncode}"
        if detail:
            xmsg += f": {detail}"
        raise CodeGenerationError(xmsg)

    return result.stdout


def resolve_built_target_executable(
    target: str,
    working_root: Path | str,
    *,
    build_tool: str = DEFAULT_BUILD_TOOL,
    logger: AppLogger | None = None,
) -> str:
    """Build ``target`` and return the path of the executable it produced.

    The build tool is asked for ``--show-output``; the line
    ``<target> <relative path>`` names the output under ``working_root``.

    Raises:
        ExecutableResolutionError: the build failed, no output line names the
            target, or the named file does not exist.
    """
    command = f"{build_tool} build --show-output {shlex.quote(target)}"
    try:
        stdout = run_generator_command(command, working_root, logger=logger)
    except CodeGenerationError as e:
        xmsg = f"Cannot build `{target}`: {e}"
        raise ExecutableResolutionError(xmsg) from e

    for line in stdout.splitlines():
        parts = line.split()
        if len(parts) == 2 and parts[0] == target:  # noqa: PLR2004
            executable = Path(working_root) / parts[1]
            if executable.is_file():
                return str(executable)
            xmsg = f"`{target}` reported {executable}, which does not exist"
            raise ExecutableResolutionError(xmsg)

    xmsg = f"`{command}` did not report an output for `{target}`"
    raise ExecutableResolutionError(xmsg)
