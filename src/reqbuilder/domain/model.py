from __future__ import annotations
from dataclasses import dataclass
import re
from typing import Iterable, Sequence

# RFC 6265 cookie-name token
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def _valid_value_char(ch: str) -> bool:
    return " " <= ch < "\x7f" and ch not in '";\\'


def _clean_value(value: str) -> str:
    value = "".join(ch for ch in value if _valid_value_char(ch))
    if " " in value or "," in value:
        return f'"{value}"'
    return value


# =========================
# Value Objects
# =========================
@dataclass(frozen=True)
class Cookie:
    """Cookie as sent by a caller or set by a server (name, value and attributes)."""
    name: str
    value: str
    path: str | None = None
    domain: str | None = None
    expires: str | None = None
    max_age: int | None = None
    secure: bool = False
    http_only: bool = False
    same_site: str | None = None

    def to_header(self) -> str:
        """Pair rendered into an outgoing ``Cookie`` header.

        Bytes a cookie value may not carry are dropped; values with a space
        or comma are quoted.
        """
        name = self.name.replace("\n", "-").replace("\r", "-")
        return f"{name}={_clean_value(self.value)}"

    @classmethod
    def parse_set_cookie(cls, header: str) -> list["Cookie"]:
        """Parses one ``Set-Cookie`` header value.

        Only the first pair is the cookie; unknown attributes are ignored.
        A malformed name or value gives an empty list.
        """
        pair, *attributes = header.split(";")
        name, sep, value = pair.partition("=")
        name, value = name.strip(), value.strip()
        if not sep or not _TOKEN_RE.match(name):
            return []
        if len(value) > 1 and value[0] == value[-1] == '"':
            value = value[1:-1]
        if not all(_valid_value_char(ch) for ch in value):
            return []

        attrs: dict = {}
        for attribute in attributes:
            key, _, val = attribute.partition("=")
            key, val = key.strip().lower(), val.strip()
            if key == "secure":
                attrs["secure"] = True
            elif key == "httponly":
                attrs["http_only"] = True
            elif key == "samesite":
                attrs["same_site"] = val or None
            elif key == "domain":
                attrs["domain"] = val.lstrip(".") or None
            elif key == "path":
                attrs["path"] = val or None
            elif key == "expires":
                attrs["expires"] = val or None
            elif key == "max-age" and val.lstrip("-").isdigit():
                attrs["max_age"] = int(val)
        return [cls(name=name, value=value, **attrs)]


def cookies_from_headers(set_cookie_headers: Iterable[str]) -> list[Cookie]:
    out: list[Cookie] = []
    for header in set_cookie_headers:
        out.extend(Cookie.parse_set_cookie(header))
    return out


def cookie_header(cookies: Sequence[Cookie], existing: str | None = None) -> str:
    """Joins cookies into a ``Cookie`` header, after any value already present."""
    pairs = [existing] if existing else []
    pairs.extend(c.to_header() for c in cookies)
    return "; ".join(pairs)


# =========================
# Cookie merge
# =========================
def merge_cookies(server: Sequence[Cookie], caller: Sequence[Cookie] | None) -> list[Cookie]:
    """Server cookies win; caller cookies only fill names the server did not set.

    One entry per name in the result. A name set twice by the server keeps
    the last value; a name repeated by the caller keeps the first.
    """
    merged: dict[str, Cookie] = {}
    for c in server:
        merged[c.name] = c
    for c in caller or ():
        if c.name not in merged:
            merged[c.name] = c
    return list(merged.values())
