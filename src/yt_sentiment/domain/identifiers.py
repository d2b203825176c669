"""
YouTube URL parsing.

Both extractors are pure string matches: they return the captured token
as-is (no trimming, no percent-decoding) or None when nothing matches.
"""

import re
from typing import Optional

_VIDEO_ID = r"[A-Za-z0-9_-]{11}"
_ID_END = r"(?![A-Za-z0-9_-])"

_VIDEO_PATTERNS = [
    # youtube.com/watch?v=ID, m.youtube.com/watch?feature=share&v=ID
    re.compile(rf"youtube\.com/(?:watch)?\?(?:[^#]*&)?v=({_VIDEO_ID}){_ID_END}"),
    # youtu.be/ID
    re.compile(rf"youtu\.be/({_VIDEO_ID}){_ID_END}"),
    re.compile(rf"youtube\.com/(?:shorts|embed|live|v)/({_VIDEO_ID}){_ID_END}"),
]
_BARE_VIDEO_ID = re.compile(_VIDEO_ID)

_CHANNEL_PATTERNS = [
    re.compile(r"youtube\.com/channel/([A-Za-z0-9_-]+)"),
    re.compile(r"youtube\.com/@([^/?#&]+)"),
    re.compile(r"youtube\.com/c/([^/?#&]+)"),
    re.compile(r"youtube\.com/user/([^/?#&]+)"),
]
_BARE_CHANNEL_ID = re.compile(r"UC[A-Za-z0-9_-]{22}")


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract a video ID from a watch URL, a short link or a bare ID

    Examples:
        >>> extract_video_id("https://youtube.com/watch?v=abc12345678")
        'abc12345678'
        >>> extract_video_id("https://youtu.be/abc12345678?t=10")
        'abc12345678'
        >>> extract_video_id("https://example.com/") is None
        True
    """
    if not url:
        return None

    for pattern in _VIDEO_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)

    if _BARE_VIDEO_ID.fullmatch(url):
        return url

    return None


def extract_channel_id(url: str) -> Optional[str]:
    """
    Extract a channel token from a channel URL or a bare channel ID

    The token is a real channel ID for ``/channel/`` URLs and bare IDs, and
    a handle, custom name or legacy username otherwise; the comments
    provider resolves the latter to a channel ID.

    Examples:
        >>> extract_channel_id("https://youtube.com/@somechannel")
        'somechannel'
        >>> extract_channel_id("https://www.youtube.com/channel/UCabcdefghijklmnopqrstuv")
        'UCabcdefghijklmnopqrstuv'
    """
    if not url:
        return None

    for pattern in _CHANNEL_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)

    if _BARE_CHANNEL_ID.fullmatch(url):
        return url

    return None


def is_channel_id(token: str) -> bool:
    """True when ``token`` is shaped like a canonical ``UC...`` channel ID"""
    return bool(_BARE_CHANNEL_ID.fullmatch(token))
