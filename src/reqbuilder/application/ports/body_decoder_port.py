from __future__ import annotations

from typing import Protocol

from reqbuilder.application.ports.http_client_port import HttpResponse


class BodyDecoderPort(Protocol):
    def read_body(self, response: HttpResponse) -> bytes:
        """Returns the payload with any Content-Encoding removed.

        Raises:
            DecodeError: the body could not be decompressed.
        """
        ...
