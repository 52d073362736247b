"""
Checks that a resource link is live and of the claimed kind.
What it does:
- YouTube links: asks the oEmbed endpoint (fails for private/deleted videos)
- Articles, courses, books: HEAD probe, then a one-byte ranged GET
- Exercises and unknown kinds: syntax check only
- Every failure (timeout, DNS, TLS, bad status) is just `False`

And, the main purpose:
Keep dead or invented links out of returned plans.
"""


import re
from urllib.parse import urlsplit

import httpx

from learnpath.core.config import Settings
from learnpath.core.logging import get_logger

log = get_logger("agent.links")

YOUTUBE_RE = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.be)/", re.IGNORECASE)
YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "youtu.be", "www.youtu.be"}
OEMBED_URL = "https://www.youtube.com/oembed"
PROBED_KINDS = {"article", "course", "book"}
_TLD_RE = re.compile(r"^[a-z]{2,63}$|^xn--[a-z0-9-]+$", re.IGNORECASE)


def is_well_formed(url: str) -> bool:
    try:
        parts = urlsplit((url or "").strip())
        host = parts.hostname or ""
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https") or " " in url.strip():
        return False
    labels = host.split(".")
    if len(labels) < 2 or not all(labels):
        return False
    return bool(_TLD_RE.match(labels[-1]))


def is_video_host(url: str) -> bool:
    try:
        host = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return False
    return host in YOUTUBE_HOSTS


def _ok(status: int) -> bool:
    return 200 <= status < 400


class LinkValidator:
    def __init__(self, settings: Settings, http: httpx.AsyncClient | None = None):
        self.video_timeout = settings.VIDEO_CHECK_TIMEOUT_SECONDS
        self.probe_timeout = settings.LINK_PROBE_TIMEOUT_SECONDS
        self.http = http or httpx.AsyncClient(
            headers={"User-Agent": "learnpath-link-check/1.0"},
            follow_redirects=False,
        )

    async def close(self) -> None:
        await self.http.aclose()

    async def validate(self, url: str, kind: str) -> bool:
        try:
            return await self._validate(url, (kind or "").lower().strip())
        except Exception as e:  # link checks never raise
            log.info(f"Link check error for {url!r}: {type(e).__name__}: {e}")
            return False

    async def _validate(self, url: str, kind: str) -> bool:
        if not is_well_formed(url):
            return False
        if kind == "video" or is_video_host(url):
            return await self._video_is_public(url)
        if kind in PROBED_KINDS:
            return await self._exists(url)
        return True

    async def _video_is_public(self, url: str) -> bool:
        if not YOUTUBE_RE.match(url):
            return False
        try:
            r = await self.http.get(
                OEMBED_URL,
                params={"url": url, "format": "json"},
                timeout=self.video_timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError:
            return False
        return r.is_success

    async def _exists(self, url: str) -> bool:
        try:
            r = await self.http.head(url, timeout=self.probe_timeout)
            if _ok(r.status_code):
                return True
        except httpx.HTTPError:
            pass
        # some servers reject HEAD; fetch a single byte instead
        try:
            r = await self.http.get(url, headers={"Range": "bytes=0-0"}, timeout=self.probe_timeout)
        except httpx.HTTPError:
            return False
        return _ok(r.status_code)
