"""Documentation fetching over HTTP."""

from __future__ import annotations

import codecs
from http.client import HTTPException
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger
from ..models import TRUNCATION_MARKER

DEFAULT_MAX_DOC_BYTES = 250_000


class DocFetcher:
    """Downloads documentation pages, tolerating unreachable sources."""

    USER_AGENT = "docdrift/0.1"

    def __init__(
        self,
        *,
        max_bytes: int = DEFAULT_MAX_DOC_BYTES,
        request_timeout: Optional[float] = 60.0,
    ) -> None:
        self.max_bytes = max_bytes
        self.request_timeout = request_timeout
        self.logger = get_logger("fetcher")

    def fetch(self, url: str) -> Optional[str]:
        """Return the decoded (possibly truncated) document text, or None on failure."""
        try:
            request = Request(url, headers={"User-Agent": self.USER_AGENT}, method="GET")
            # urlopen follows redirects and raises HTTPError for non-2xx answers.
            with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            self.logger.warning("Skipping doc (fetch failed): %s (%s)", url, exc.code)
            return None
        except (URLError, OSError, HTTPException, ValueError) as exc:
            # ValueError: malformed URL; HTTPException: body cut off mid-read.
            reason = getattr(exc, "reason", exc)
            self.logger.warning("Skipping doc (fetch failed): %s (%s)", url, reason)
            return None
        return self.decode(raw)

    def decode(self, raw: bytes) -> str:
        if len(raw) > self.max_bytes:
            # A non-final decode holds back a character split at the cut.
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            text = decoder.decode(raw[: self.max_bytes], final=False)
            self.logger.debug("Document truncated to %d bytes", self.max_bytes)
            return text + TRUNCATION_MARKER
        return raw.decode("utf-8", errors="replace")


__all__ = ["DEFAULT_MAX_DOC_BYTES", "DocFetcher"]
