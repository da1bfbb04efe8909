from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from reqbuilder.domain.model import Cookie, cookies_from_headers


class HttpResponse:
    """Result of one exchange, with the body exactly as it came off the wire.

    ``content`` is still content-encoded; use ``RequestBuilder.read_body`` to
    get the decompressed payload.
    """

    def __init__(
        self,
        status_code: int,
        content: bytes,
        url: str,
        headers: Mapping[str, str],
        *,
        set_cookie: Sequence[str] = (),
        raw: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.url = url
        self.headers = {k.lower(): v for k, v in headers.items()}
        self.set_cookie = list(set_cookie)
        self.json_data: Any | None = None
        self._raw = raw

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)

    @property
    def cookies(self) -> list[Cookie]:
        return cookies_from_headers(self.set_cookie)

    @property
    def raw(self) -> Any:
        if self._raw is None:
            raise AttributeError("raw response not available")
        return self._raw

    def __repr__(self) -> str:
        return f"<HttpResponse [{self.status_code}] {self.url}>"


class HttpClientPort(Protocol):
    """Minimal transport: one synchronous request, stream fully read and released."""

    def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse: ...
    def close(self) -> None: ...
