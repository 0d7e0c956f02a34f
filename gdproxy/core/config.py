"""Runtime settings, read from the environment (and an optional .env file)."""
from __future__ import annotations
import os
from dataclasses import dataclass

from dotenv import load_dotenv

UPSTREAM_HOST = "gdplayer.vip"

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    upstream_host: str = UPSTREAM_HOST
    resolver_url: str = f"https://{UPSTREAM_HOST}/api/video"
    user_agent: str = DEFAULT_UA
    upstream_timeout: float = 15          # resolver call + embed page fetch
    stream_connect_timeout: float = 10
    stream_read_timeout: float = 60       # per read, no total cap on media
    forward_range: bool = True
    verify_ssl: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @property
    def embed_base(self) -> str:
        return f"https://{self.upstream_host}"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        host = os.getenv("GDPROXY_UPSTREAM_HOST", UPSTREAM_HOST)
        return cls(
            upstream_host=host,
            resolver_url=os.getenv("GDPROXY_RESOLVER_URL", f"https://{host}/api/video"),
            user_agent=os.getenv("GDPROXY_USER_AGENT", DEFAULT_UA),
            upstream_timeout=float(os.getenv("GDPROXY_UPSTREAM_TIMEOUT", "15")),
            stream_connect_timeout=float(os.getenv("GDPROXY_STREAM_CONNECT_TIMEOUT", "10")),
            stream_read_timeout=float(os.getenv("GDPROXY_STREAM_READ_TIMEOUT", "60")),
            forward_range=_env_bool("GDPROXY_FORWARD_RANGE", True),
            verify_ssl=_env_bool("GDPROXY_VERIFY_SSL", True),
            host=os.getenv("GDPROXY_HOST", "0.0.0.0"),
            port=int(os.getenv("GDPROXY_PORT", "8000")),
            log_level=os.getenv("GDPROXY_LOG_LEVEL", "INFO").upper(),
        )
