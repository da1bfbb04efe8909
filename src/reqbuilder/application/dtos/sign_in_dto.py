from __future__ import annotations

import json
from dataclasses import dataclass, field


@dataclass(frozen=True)
class UserSignIn:
    """Login request body. Empty ``email``/``phoneNumber`` are left out."""
    password: str
    email: str = ""
    phone_number: str = ""

    def to_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.email:
            out["email"] = self.email
        out["password"] = self.password
        if self.phone_number:
            out["phoneNumber"] = self.phone_number
        return out

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode()


@dataclass
class SignIn:
    data: str = field(default="", metadata={"json": "data"})
