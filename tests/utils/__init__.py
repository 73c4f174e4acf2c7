# tests/utils/__init__.py

from .archives import corrupt_member, make_wheel, mock_client
from .commands import python_command
from .constants import DEFAULT_TEST_LOG_LEVEL


__all__ = [  # noqa: RUF022
    # archives
    "corrupt_member",
    "make_wheel",
    "mock_client",
    # commands
    "python_command",
    # constants
    "DEFAULT_TEST_LOG_LEVEL",
]
