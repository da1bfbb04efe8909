from __future__ import annotations


class ReqBuilderError(Exception):
    """Base class for every failure raised by reqbuilder."""


class RequestConstructionError(ReqBuilderError):
    """Invalid method, URL or header; the request never left the process."""


class TransportError(ReqBuilderError):
    """Network or connection failure reported by the HTTP client."""


class DecodeError(ReqBuilderError):
    """Malformed compressed body or decoder construction failure."""


class JSONDecodeError(ReqBuilderError):
    """Body is not JSON or does not fit the requested target."""


class RequestFailedError(ReqBuilderError):
    pass
