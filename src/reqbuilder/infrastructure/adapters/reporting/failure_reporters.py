from __future__ import annotations

from typing import NoReturn

import pytest

from reqbuilder.application.ports.failure_reporter_port import FailureReporterPort
from reqbuilder.domain.errors import ReqBuilderError, RequestFailedError


class PytestFailureReporter(FailureReporterPort):
    """Fails the running pytest test, the way an assertion would."""

    def fail(self, reason: str, *, cause: BaseException | None = None) -> NoReturn:
        if cause is not None:
            reason = f"{reason}: {type(cause).__name__}: {cause}"
        pytest.fail(reason)


class RaisingFailureReporter(FailureReporterPort):
    """Raises typed errors so library callers decide what is fatal."""

    def fail(self, reason: str, *, cause: BaseException | None = None) -> NoReturn:
        if isinstance(cause, ReqBuilderError):
            raise cause
        raise RequestFailedError(reason) from cause
