"""Per-report image cache.

Thumbnails and logos are fetched over HTTP at most once per report. A fetch
that fails for any reason (timeout, HTTP error, non-image response, tiny
error page, undecodable or oversized image) is remembered as
``UNAVAILABLE`` and never retried; callers get ``None`` and render their
text fallback instead.

Usage::

    with AssetCache(timeout=10) as assets:
        data = assets.get(post.thumbnail_url)
        if data is None:
            ...  # "Kein Bild"
"""

import io
import logging

import requests
from PIL import Image, UnidentifiedImageError

from ..errors import AssetUnavailable

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; SocialDash/1.0)"


class _Unavailable:
    """Marker stored for URLs whose fetch failed."""

    def __repr__(self) -> str:
        return "UNAVAILABLE"

    def __bool__(self) -> bool:
        return False


UNAVAILABLE = _Unavailable()


class AssetCache:
    """Lazily fetches and caches binary images for one report.

    Args:
        timeout: Seconds allowed per request.
        session: Optional ``requests.Session``; one is created (and closed
            by ``close()``) when omitted.
        min_bytes: Responses smaller than this are treated as error pages.
    """

    def __init__(self, timeout: float = 10.0, session: requests.Session | None = None,
                 min_bytes: int = 1000):
        self.timeout = timeout
        self.min_bytes = min_bytes
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._entries: dict[str, bytes | _Unavailable] = {}
        self._sizes: dict[str, tuple[int, int]] = {}
        self.fetch_count = 0

    def __contains__(self, url: str) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __enter__(self) -> "AssetCache":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------

    def fetch(self, url: str) -> bytes | _Unavailable:
        """Return the cached entry for ``url``, fetching it on first use."""
        if url in self._entries:
            return self._entries[url]
        try:
            data, size = self._download(url)
        except AssetUnavailable as exc:
            logger.warning("Image unavailable: %s (%s)", url, exc)
            self._entries[url] = UNAVAILABLE
        else:
            self._entries[url] = data
            self._sizes[url] = size
        return self._entries[url]

    def get(self, url: str | None) -> bytes | None:
        """Image bytes for ``url`` or ``None``. Never raises."""
        if not url or not url.startswith(("http://", "https://")):
            return None
        entry = self.fetch(url)
        return entry if isinstance(entry, bytes) else None

    def image_size(self, url: str) -> tuple[int, int] | None:
        """Pixel (width, height) of a successfully fetched image."""
        return self._sizes.get(url)

    def _download(self, url: str) -> tuple[bytes, tuple[int, int]]:
        self.fetch_count += 1
        try:
            response = self._session.get(url, timeout=self.timeout,
                                         headers={"User-Agent": USER_AGENT},
                                         allow_redirects=True)
        except requests.RequestException as exc:
            raise AssetUnavailable(f"request failed: {exc}", {"url": url}) from exc

        if not response.ok:
            raise AssetUnavailable(f"HTTP {response.status_code}", {"url": url})
        content_type = response.headers.get("content-type", "image/jpeg")
        if not content_type.startswith("image/"):
            raise AssetUnavailable(f"non-image content-type {content_type}",
                                   {"url": url})
        data = response.content
        if len(data) < self.min_bytes:
            raise AssetUnavailable(f"too small ({len(data)} bytes)", {"url": url})
        try:
            with Image.open(io.BytesIO(data)) as img:
                size = img.size
                img.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError,
                SyntaxError, ValueError) as exc:
            raise AssetUnavailable(f"undecodable image: {exc}", {"url": url}) from exc
        return data, size
