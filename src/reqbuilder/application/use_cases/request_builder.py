from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
import dataclasses
import json
import re
from typing import Any, Protocol

import urllib3

from reqbuilder.application.ports.body_decoder_port import BodyDecoderPort
from reqbuilder.application.ports.failure_reporter_port import FailureReporterPort
from reqbuilder.application.ports.http_client_port import HttpClientPort, HttpResponse
from reqbuilder.domain.errors import (
    DecodeError,
    JSONDecodeError,
    ReqBuilderError,
    RequestConstructionError,
)
from reqbuilder.domain.model import Cookie, cookie_header, merge_cookies

# RFC 7230 token
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

JSON_CONTENT_TYPE = "application/json"


class ResponseDecoder(Protocol):
    def __call__(self, response: HttpResponse, body: BodyDecoderPort) -> None: ...


class JsonInto:
    """Parses a JSON response into ``target`` in place.

    Runs only when Content-Type is exactly ``application/json``. Targets:
    a mutable mapping (JSON object), a mutable sequence (JSON array) or a
    dataclass instance (JSON object; keys from ``metadata["json"]`` or the
    field name).
    """

    def __init__(self, target: Any) -> None:
        self.target = target

    def __call__(self, response: HttpResponse, body: BodyDecoderPort) -> None:
        if response.header("Content-Type") != JSON_CONTENT_TYPE:
            return
        payload = body.read_body(response)
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise JSONDecodeError(f"invalid JSON body: {e}") from e
        response.json_data = data
        self._assign(data)

    def _assign(self, data: Any) -> None:
        target = self.target
        if isinstance(target, MutableMapping):
            if not isinstance(data, dict):
                raise JSONDecodeError(f"expected JSON object, got {type(data).__name__}")
            target.clear()
            target.update(data)
        elif isinstance(target, MutableSequence):
            if not isinstance(data, list):
                raise JSONDecodeError(f"expected JSON array, got {type(data).__name__}")
            target[:] = data
        elif dataclasses.is_dataclass(target) and not isinstance(target, type):
            if not isinstance(data, dict):
                raise JSONDecodeError(f"expected JSON object, got {type(data).__name__}")
            for f in dataclasses.fields(target):
                key = f.metadata.get("json", f.name)
                if key in data:
                    try:
                        setattr(target, f.name, data[key])
                    except dataclasses.FrozenInstanceError as e:
                        raise JSONDecodeError(f"cannot decode into frozen {type(target).__name__}") from e
        else:
            raise JSONDecodeError(f"unsupported JSON target {type(target).__name__}")


class RequestBuilder:
    """Sends test requests over one owned HTTP client.

    Every send returns ``(response, merged_cookies)``; the caller carries the
    cookie list into the next call. Construction, transport and JSON failures
    go to the failure reporter, which never returns.
    """

    def __init__(
        self,
        http: HttpClientPort,
        reporter: FailureReporterPort,
        *,
        decoder: BodyDecoderPort | None = None,
        verbose: bool = False,
    ) -> None:
        if decoder is None:
            from reqbuilder.infrastructure.adapters.decoding.content_decoder import ContentDecoder

            decoder = ContentDecoder()
        self.http = http
        self.reporter = reporter
        self.decoder = decoder
        self._verbose = verbose

    def _log(self, msg: str) -> None:
        if self._verbose:
            print(f"[RequestBuilder] {msg}")

    def __enter__(self) -> "RequestBuilder":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    # ---------- public presets ----------
    def send_with_body(
        self,
        method: str,
        host: str,
        path: str,
        body: bytes | str,
        *,
        headers: Mapping[str, str] | None = None,
        cookies: Sequence[Cookie] | None = None,
        authorization: str | None = None,
        timeout: float | None = None,
        result: Any | None = None,
    ) -> tuple[HttpResponse, list[Cookie]]:
        content = body.encode() if isinstance(body, str) else bytes(body)
        return self.execute(
            method,
            host + path,
            content=content,
            headers=headers,
            cookies=cookies,
            authorization=authorization,
            timeout=timeout,
            decode=JsonInto(result) if result is not None else None,
        )

    def send_multipart(
        self,
        method: str,
        host: str,
        path: str,
        field_value: bytes | str,
        field_name: str,
        *,
        headers: Mapping[str, str] | None = None,
        cookies: Sequence[Cookie] | None = None,
        authorization: str | None = None,
        timeout: float | None = None,
        result: Any | None = None,
    ) -> tuple[HttpResponse, list[Cookie]]:
        """Posts a single ``multipart/form-data`` field with a generated boundary."""
        content, content_type = urllib3.encode_multipart_formdata({field_name: field_value})
        return self.execute(
            method,
            host + path,
            content=content,
            content_type=content_type,
            headers=headers,
            cookies=cookies,
            authorization=authorization,
            timeout=timeout,
            decode=JsonInto(result) if result is not None else None,
        )

    def send_without_body(
        self,
        method: str,
        host: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        cookies: Sequence[Cookie] | None = None,
        authorization: str | None = None,
        timeout: float | None = None,
        result: Any | None = None,
    ) -> tuple[HttpResponse, list[Cookie]]:
        return self.execute(
            method,
            host + path,
            headers=headers,
            cookies=cookies,
            authorization=authorization,
            timeout=timeout,
            decode=JsonInto(result) if result is not None else None,
        )

    def read_body(self, response: HttpResponse) -> bytes:
        """Body with Content-Encoding removed.

        Raises:
            DecodeError: malformed compressed stream.
        """
        return self.decoder.read_body(response)

    # ---------- pipeline ----------
    def execute(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        content_type: str | None = None,
        headers: Mapping[str, str] | None = None,
        cookies: Sequence[Cookie] | None = None,
        authorization: str | None = None,
        timeout: float | None = None,
        decode: ResponseDecoder | None = None,
    ) -> tuple[HttpResponse, list[Cookie]]:
        """Build, attach, dispatch, merge cookies, then run the optional decode step."""
        try:
            if not _METHOD_RE.match(method):
                raise RequestConstructionError(f"invalid method {method!r}")
            outgoing = self._outgoing_headers(headers, content_type, cookies, authorization)
            response = self.http.send(
                method, url, content=content, headers=outgoing, timeout=timeout
            )
        except ReqBuilderError as e:
            self._log(f"{method} {url} failed: {e}")
            self.reporter.fail(f"{method} {url}", cause=e)

        merged = merge_cookies(response.cookies, cookies)
        self._log(f"{method} {url} -> {response.status_code} | cookies: {[c.name for c in merged]}")

        if decode is not None:
            try:
                decode(response, self.decoder)
            except (DecodeError, JSONDecodeError) as e:
                self._log(f"{method} {url} decode failed: {e}")
                self.reporter.fail(f"{method} {url}: decoding response", cause=e)
        return response, merged

    def _outgoing_headers(
        self,
        headers: Mapping[str, str] | None,
        content_type: str | None,
        cookies: Sequence[Cookie] | None,
        authorization: str | None,
    ) -> dict[str, str]:
        # case-insensitive set: a later name replaces an earlier one
        out: dict[str, tuple[str, str]] = {}
        for k, v in (headers or {}).items():
            out[k.lower()] = (k, v)
        if content_type:
            out["content-type"] = ("Content-Type", content_type)
        if authorization:
            out["authorization"] = ("Authorization", authorization)
        if cookies:
            existing = out.get("cookie", ("Cookie", ""))[1]
            out["cookie"] = ("Cookie", cookie_header(cookies, existing))
        return dict(out.values())
