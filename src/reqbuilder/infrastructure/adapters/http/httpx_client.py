from __future__ import annotations
from http.cookiejar import CookieJar
from typing import Mapping
import httpx
from reqbuilder.application.ports.http_client_port import HttpClientPort, HttpResponse
from reqbuilder.domain.errors import RequestConstructionError, TransportError
from reqbuilder.infrastructure.adapters.http.cookie_policy import RejectAllCookiesPolicy

class HttpxClient(HttpClientPort):
    def __init__(
        self,
        timeout: float = 30.0,
        *,
        user_agent: str = "reqbuilder/0.1",
        follow_redirects: bool = True,
        transport: httpx.BaseTransport | None = None,
        verbose: bool = False,
    ) -> None:
        """HTTP client adapter backed by a persistent httpx.Client.

        - Reuses one connection pool for every request of the session
        - Never stores cookies: the jar rejects everything, callers thread
          cookies explicitly
        - Returns the body still content-encoded (raw stream)

        Args:
            timeout (float, optional): Default timeout for requests. Defaults to 30.0.
            user_agent (str, optional): Default User-Agent header.
            follow_redirects (bool, optional): Whether to follow redirects. Defaults to True.
            transport (httpx.BaseTransport | None, optional): Transport override, e.g. httpx.MockTransport.
            verbose (bool, optional): Print diagnostics. Defaults to False.
        """
        self._client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            cookies=CookieJar(policy=RejectAllCookiesPolicy()),
            follow_redirects=follow_redirects,
            transport=transport,
        )
        self._verbose = verbose

    def _log(self, msg: str) -> None:
        if self._verbose:
            print(f"[HttpxClient] {msg}")

    def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Sends one request and reads the raw body.

        Args:
            method (str): HTTP method.
            url (str): Absolute URL.
            content (bytes | None, optional): Request body. Defaults to None (no body).
            headers (Mapping[str, str] | None, optional): Headers to include. Defaults to None.
            timeout (float | None, optional): Per-request timeout. Defaults to the client timeout.

        Returns:
            HttpResponse: Response with the undecoded body.

        Raises:
            RequestConstructionError: URL, scheme or headers are invalid.
            TransportError: The exchange failed on the network.
        """
        try:
            request = self._client.build_request(
                method,
                url,
                content=content,
                headers=headers,
                timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
            )
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            raise RequestConstructionError(f"{method} {url}: {e}") from e

        self._log(f"{method} {url} | Cookie: {request.headers.get('Cookie', '-')[:240]}")
        try:
            resp = self._client.send(request, stream=True)
        except (httpx.UnsupportedProtocol, httpx.LocalProtocolError) as e:
            raise RequestConstructionError(f"{method} {url}: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url}: {e}") from e

        # the transport stream, not iter_raw(): in-memory responses are already read
        try:
            body = b"".join(resp.stream)
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise TransportError(f"{method} {url}: reading body: {e}") from e
        finally:
            resp.close()

        set_cookie = resp.headers.get_list("set-cookie")
        self._log(f"{method} {url} -> {resp.status_code} len={len(body)}")
        for value in set_cookie:
            self._log(f"{method} {url} | Set-Cookie: {value[:240]}")
        return HttpResponse(
            resp.status_code,
            body,
            str(resp.url),
            resp.headers,
            set_cookie=set_cookie,
            raw=resp,
        )

    def close(self) -> None:
        self._client.close()
