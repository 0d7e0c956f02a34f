"""
Core types for the relay pipeline.

  - EmbedToken: (server url, video id) pulled out of an embed page
  - StreamTarget: the slug + quality parsed from a /stream/ path
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from urllib.parse import quote, unquote

from .errors import InvalidRequest

STREAM_PATH_RE = re.compile(r"([^/]+)/([0-9]+)")


def slug_segment(slug: str) -> str:
    """Percent-encode a slug so it can only ever be one path segment."""
    return quote(slug, safe="")


# ──────────────────────────────
#  Embed token (returned by the extractor)
# ──────────────────────────────
@dataclass(frozen=True)
class EmbedToken:
    server_url: str
    video_id: str

    def media_url(self, quality: str) -> str:
        return f"{self.server_url}/?video_id={self.video_id}&quality={quality}&action=p"

    def to_dict(self):
        return {"server_url": self.server_url, "video_id": self.video_id}


# ──────────────────────────────
#  Stream request target
# ──────────────────────────────
@dataclass(frozen=True)
class StreamTarget:
    slug: str
    quality: str                      # digits only, e.g. "360" | "720" | "1080"

    @classmethod
    def parse(cls, rest: str) -> "StreamTarget":
        """Parse the still percent-encoded part of a stream path after ``/stream/``.

        Splitting happens before decoding, so an encoded slash stays inside the slug.
        """
        m = STREAM_PATH_RE.fullmatch(rest)
        if not m:
            raise InvalidRequest("Invalid stream URL")
        return cls(slug=unquote(m.group(1)), quality=m.group(2))
