from __future__ import annotations
from reqbuilder.application.ports.http_client_port import HttpResponse

class FakeHttp:
    def __init__(self, response: HttpResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or HttpResponse(200, b"", "http://test/", {})
        self.error = error
        self.sent: list[dict] = []
        self.closed = False
    def send(self, method, url, *, content=None, headers=None, timeout=None):
        self.sent.append({"method": method, "url": url, "content": content, "headers": dict(headers or {}), "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response
    def close(self):
        self.closed = True

class RecordingReporter:
    """Captures the failure and raises so the pipeline stops like a real reporter."""
    class Stop(Exception):
        pass
    def __init__(self) -> None:
        self.reasons: list[str] = []
        self.causes: list[BaseException | None] = []
    def fail(self, reason, *, cause=None):
        self.reasons.append(reason)
        self.causes.append(cause)
        raise RecordingReporter.Stop(reason)
