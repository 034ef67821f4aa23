from __future__ import annotations

import time

import httpx
from bs4 import BeautifulSoup  # type: ignore

from .errors import TitleFetchError
from .log import get_logger
from .model import TITLE_MAX
from .strutil import truncate

log = get_logger(__name__)

# Reading stops once either marker has been seen.
STOP_MARKERS = (b"</title>", b"</header>")


def fetch_title(url: str, *, timeout_s: int, user_agent: str, max_bytes: int) -> str:
    """GET ``url`` and return its <title> text, truncated to the title limit."""
    return extract_title(fetch_head(url, timeout_s=timeout_s, user_agent=user_agent, max_bytes=max_bytes))


def fetch_head(url: str, *, timeout_s: int, user_agent: str, max_bytes: int) -> bytes:
    """Download the start of a page, up to the first stop marker or ``max_bytes``."""
    t0 = time.time()
    timeout = httpx.Timeout(timeout_s, connect=timeout_s)
    headers = {"User-Agent": user_agent}
    buf = bytearray()
    try:
        with httpx.Client(follow_redirects=True, headers=headers, timeout=timeout) as client:
            with client.stream("GET", url) as r:
                r.raise_for_status()
                for chunk in r.iter_bytes():
                    buf.extend(chunk)
                    if len(buf) >= max_bytes or _has_stop_marker(buf):
                        break
    except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
        raise TitleFetchError(f"Could not download page {url}: {e}") from e
    log.debug("Fetched %d bytes from %s in %d ms", len(buf), url, int((time.time() - t0) * 1000))
    return bytes(buf[:max_bytes])


def extract_title(content: bytes | str) -> str:
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    if not content:
        raise TitleFetchError("No webpage contents read.")

    lowered = content.lower()
    start = lowered.find("<title")
    end = lowered.find("</title>")
    if start == -1:
        raise TitleFetchError("No <title> tag.")
    if end == -1:
        raise TitleFetchError("No </title> tag.")
    if end < start:
        raise TitleFetchError("Malformed page: </title> before <title>.")

    soup = BeautifulSoup(content[start : end + len("</title>")], "lxml")
    title = soup.title.get_text(" ", strip=True) if soup.title else ""
    return truncate(" ".join(title.split()), TITLE_MAX)


def _has_stop_marker(buf: bytearray) -> bool:
    lowered = bytes(buf).lower()
    return any(m in lowered for m in STOP_MARKERS)
