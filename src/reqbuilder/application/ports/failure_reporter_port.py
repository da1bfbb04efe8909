from __future__ import annotations

from typing import NoReturn, Protocol


class FailureReporterPort(Protocol):
    """Aborts the current unit of work with a diagnostic."""

    def fail(self, reason: str, *, cause: BaseException | None = None) -> NoReturn:
        """Never returns: either fails the running test or raises."""
        ...
