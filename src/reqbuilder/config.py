from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env if present
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    http_timeout: float = float(os.getenv("REQBUILDER_HTTP_TIMEOUT", "30"))
    user_agent: str = os.getenv("REQBUILDER_USER_AGENT", "reqbuilder/0.1")
    follow_redirects: bool = _flag("REQBUILDER_FOLLOW_REDIRECTS", "1")
    verbose: bool = _flag("REQBUILDER_VERBOSE", "0")


settings = Settings()
