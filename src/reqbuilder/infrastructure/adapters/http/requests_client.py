from __future__ import annotations

from typing import Mapping

import requests
import urllib3

from reqbuilder.application.ports.http_client_port import HttpClientPort, HttpResponse
from reqbuilder.domain.errors import RequestConstructionError, TransportError
from reqbuilder.infrastructure.adapters.http.cookie_policy import RejectAllCookiesPolicy

_CONSTRUCTION_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)


class RequestsHttpClient(HttpClientPort):
    """HTTP client adapter backed by a persistent requests.Session.

    - Shares one connection pool across the session
    - Cookie jar rejects everything; cookies are threaded by the caller
    - Reads the raw urllib3 stream so the body keeps its Content-Encoding
    """

    def __init__(
        self,
        default_headers: Mapping[str, str] | None = None,
        *,
        timeout: float = 30.0,
        follow_redirects: bool = True,
        verbose: bool = False,
    ) -> None:
        self.session = requests.Session()
        self.session.cookies.set_policy(RejectAllCookiesPolicy())
        if default_headers:
            self.session.headers.update(dict(default_headers))
        self._timeout = timeout
        self._follow_redirects = follow_redirects
        self._verbose = verbose

    def _log(self, msg: str) -> None:
        if self._verbose:
            print(f"[RequestsHttpClient] {msg}")

    def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        try:
            prepped = self.session.prepare_request(
                requests.Request(method, url, data=content, headers=dict(headers or {}))
            )
        except _CONSTRUCTION_ERRORS as e:
            raise RequestConstructionError(f"{method} {url}: {e}") from e

        self._log(f"{method} {url} | Cookie: {prepped.headers.get('Cookie', '-')[:240]}")
        try:
            resp = self.session.send(
                prepped,
                stream=True,
                timeout=self._timeout if timeout is None else timeout,
                allow_redirects=self._follow_redirects,
            )
        except _CONSTRUCTION_ERRORS as e:
            raise RequestConstructionError(f"{method} {url}: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"{method} {url}: {e}") from e

        try:
            body = resp.raw.read(decode_content=False)
        except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
            raise TransportError(f"{method} {url}: reading body: {e}") from e
        finally:
            resp.close()

        # requests folds repeated headers; the urllib3 headers keep each Set-Cookie
        raw_headers = getattr(resp.raw, "headers", None)
        if hasattr(raw_headers, "getlist"):
            set_cookie = raw_headers.getlist("Set-Cookie")
        else:
            set_cookie = [resp.headers["Set-Cookie"]] if "Set-Cookie" in resp.headers else []
        self._log(f"{method} {url} -> {resp.status_code} len={len(body)}")
        for value in set_cookie:
            self._log(f"{method} {url} | Set-Cookie: {value[:240]}")
        return HttpResponse(
            resp.status_code,
            body,
            resp.url,
            resp.headers,
            set_cookie=set_cookie,
            raw=resp,
        )

    def close(self) -> None:
        self.session.close()
