from __future__ import annotations

from http.cookiejar import DefaultCookiePolicy


class RejectAllCookiesPolicy(DefaultCookiePolicy):
    """Keeps a client's cookie jar empty.

    Cookies travel only through the explicit list the caller threads from
    one call to the next, never through the transport's own jar.
    """

    def set_ok(self, cookie, request) -> bool:  # type: ignore[no-untyped-def]
        return False

    def return_ok(self, cookie, request) -> bool:  # type: ignore[no-untyped-def]
        return False
