"""pytest fixtures, registered through the ``pytest11`` entry point.

Override ``reqbuilder_transport`` in a conftest to serve requests
in-process (``httpx.MockTransport``) instead of over the network.
"""
from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from reqbuilder.application.use_cases.request_builder import RequestBuilder
from reqbuilder.config import settings
from reqbuilder.infrastructure.adapters.http.httpx_client import HttpxClient
from reqbuilder.infrastructure.adapters.reporting.failure_reporters import PytestFailureReporter


@pytest.fixture
def reqbuilder_transport() -> httpx.BaseTransport | None:
    return None


@pytest.fixture
def reqbuilder_http(reqbuilder_transport: httpx.BaseTransport | None) -> Iterator[HttpxClient]:
    http = HttpxClient(
        timeout=settings.http_timeout,
        user_agent=settings.user_agent,
        follow_redirects=settings.follow_redirects,
        transport=reqbuilder_transport,
        verbose=settings.verbose,
    )
    yield http
    http.close()


@pytest.fixture
def request_builder(reqbuilder_http: HttpxClient) -> RequestBuilder:
    # one builder per test, owning the client fixture's handle
    return RequestBuilder(reqbuilder_http, PytestFailureReporter(), verbose=settings.verbose)
