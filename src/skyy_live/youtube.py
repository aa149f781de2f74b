"""Derive playable embed references from YouTube links."""
from __future__ import annotations

import re
from typing import Optional

EMBED_BASE_URL = "https://www.youtube.com/embed/"

_VIDEO_ID = r"([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"
_SCHEME = r"^(?:https?://)?"

_SHORT_LINK_RE = re.compile(_SCHEME + r"youtu\.be/" + _VIDEO_ID)
_LONG_FORM_RE = re.compile(_SCHEME + r"(?:www\.|m\.)?youtube\.com/watch\?(?:[^#]*&)?v=" + _VIDEO_ID)
_EMBED_PATH_RE = re.compile(_SCHEME + r"(?:www\.)?youtube(?:-nocookie)?\.com/embed/" + _VIDEO_ID)


def youtube_id(url: Optional[str]) -> Optional[str]:
    """Return the video id of a shared-link, long-form or embed URL.

    Only YouTube hosts and 11 character ids are accepted. Anything else,
    including ``None`` and non-string values, yields ``None``.
    """

    if not isinstance(url, str):
        return None
    cleaned = url.strip()
    if not cleaned:
        return None
    for pattern in (_SHORT_LINK_RE, _LONG_FORM_RE, _EMBED_PATH_RE):
        match = pattern.match(cleaned)
        if match:
            return match.group(1)
    return None


def embed_url(url: Optional[str], *, autoplay: bool = False) -> Optional[str]:
    video_id = youtube_id(url)
    if not video_id:
        return None
    flag = 1 if autoplay else 0
    return f"{EMBED_BASE_URL}{video_id}?autoplay={flag}&mute=1&rel=0&modestbranding=1"


__all__ = ["EMBED_BASE_URL", "embed_url", "youtube_id"]
