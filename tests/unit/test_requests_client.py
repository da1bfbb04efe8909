from __future__ import annotations
import io
import zlib

import pytest
import requests
from requests.adapters import BaseAdapter, HTTPAdapter
from urllib3 import HTTPHeaderDict, HTTPResponse as Urllib3Response

from reqbuilder.application.use_cases.request_builder import RequestBuilder
from reqbuilder.domain.errors import RequestConstructionError, TransportError
from reqbuilder.domain.model import Cookie
from reqbuilder.infrastructure.adapters.http.requests_client import RequestsHttpClient
from reqbuilder.infrastructure.adapters.reporting.failure_reporters import RaisingFailureReporter

HOST = "http://api.test"

class FakeAdapter(BaseAdapter):
    """Serves canned urllib3 responses and keeps the prepared requests."""
    def __init__(self, status=200, body=b"", headers=(), error=None) -> None:
        super().__init__()
        self.status, self.body, self.headers, self.error = status, body, list(headers), error
        self.sent: list[requests.PreparedRequest] = []
    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.sent.append(request)
        if self.error is not None:
            raise self.error
        headers = HTTPHeaderDict()
        for k, v in self.headers:
            headers.add(k, v)
        raw = Urllib3Response(body=io.BytesIO(self.body), headers=headers, status=self.status,
                              preload_content=False, decode_content=False)
        return HTTPAdapter().build_response(request, raw)
    def close(self):
        pass

def _builder(adapter: FakeAdapter) -> RequestBuilder:
    http = RequestsHttpClient()
    http.session.mount("http://", adapter)
    return RequestBuilder(http, RaisingFailureReporter())

def test_login_cookie_threading():
    adapter = FakeAdapter(headers=[("Set-Cookie", "session=xyz; Path=/"), ("Set-Cookie", "csrf=1")])
    with _builder(adapter) as rb:
        resp, cookies = rb.send_with_body("POST", HOST, "/login", b'{"username":"a","password":"b"}',
                                          cookies=[Cookie("session", "old")], authorization="Bearer t")
    sent = adapter.sent[0]
    assert resp.status_code == 200
    assert sent.body == b'{"username":"a","password":"b"}'
    assert sent.headers["Cookie"] == "session=old"
    assert sent.headers["Authorization"] == "Bearer t"
    assert {c.name: c.value for c in cookies} == {"session": "xyz", "csrf": "1"}

def test_session_jar_stays_empty():
    adapter = FakeAdapter(headers=[("Set-Cookie", "session=xyz")])
    with _builder(adapter) as rb:
        rb.send_without_body("GET", HOST, "/login")
        rb.send_without_body("GET", HOST, "/me")
        assert len(rb.http.session.cookies) == 0
    assert "Cookie" not in adapter.sent[1].headers

def test_without_body_has_no_body():
    adapter = FakeAdapter(status=204)
    with _builder(adapter) as rb:
        resp, _ = rb.send_without_body("GET", HOST, "/ping")
    assert adapter.sent[0].body is None
    assert resp.status_code == 204

def test_raw_deflate_body_is_not_decoded_by_requests():
    c = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    compressed = c.compress(b"hello deflate") + c.flush()
    adapter = FakeAdapter(body=compressed, headers=[("Content-Encoding", "deflate")])
    with _builder(adapter) as rb:
        resp, _ = rb.send_without_body("GET", HOST, "/")
        assert resp.content == compressed
        assert rb.read_body(resp) == b"hello deflate"

def test_missing_scheme_is_a_construction_error():
    with _builder(FakeAdapter()) as rb:
        with pytest.raises(RequestConstructionError):
            rb.send_without_body("GET", "api.test", "/x")

def test_unmounted_scheme_is_a_construction_error():
    with _builder(FakeAdapter()) as rb:
        with pytest.raises(RequestConstructionError):
            rb.send_without_body("GET", "ftp://api.test", "/x")

def test_connection_error_is_a_transport_error():
    with _builder(FakeAdapter(error=requests.ConnectionError("refused"))) as rb:
        with pytest.raises(TransportError, match="refused"):
            rb.send_without_body("GET", HOST, "/")
