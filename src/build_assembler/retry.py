# src/build_assembler/retry.py

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from .constants import DEFAULT_FETCH_ATTEMPTS
from .errors import RetryExhaustedError
from .logs import AppLogger, get_logger


T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Re-run an operation a bounded number of times on selected errors.

    ``attempts`` counts the first try, so the default of 2 means one retry.
    Errors outside ``retry_on`` propagate immediately.
    """

    attempts: int = DEFAULT_FETCH_ATTEMPTS
    retry_on: tuple[type[BaseException], ...] = (OSError,)

    def __post_init__(self) -> None:
        if self.attempts < 1:
            xmsg = f"RetryPolicy needs at least one attempt, got {self.attempts}"
            raise ValueError(xmsg)

    def call(
        self,
        operation: Callable[[], T],
        *,
        label: str = "operation",
        logger: AppLogger | None = None,
    ) -> T:
        """Return the first successful result of ``operation``.

        Raises:
            RetryExhaustedError: every attempt failed; ``failures`` holds the
                errors in attempt order.
        """
        logger = logger or get_logger()
        failures: list[BaseException] = []
        for attempt in range(1, self.attempts + 1):
            try:
                return operation()
            except self.retry_on as e:
                failures.append(e)
                if attempt < self.attempts:
                    logger.debug(
                        "Attempt %d/%d of %s failed, retrying: %s",
                        attempt,
                        self.attempts,
                        label,
                        e,
                    )
        raise RetryExhaustedError(label, failures)
