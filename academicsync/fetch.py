"""
Fetching raw page contents (HTML, JSON envelopes and PDFs).

- Every GET is memoized per URL in a FetchCache, so each page is
  downloaded at most once per process.
- PDFs are turned into the flat list of text fragments the transcript
  parser walks with a TokenCursor.
- POSTs (survey answers) are never cached.

requests is blocking, so every request runs in a worker thread and the
adapters simply await it.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urljoin

import pdfplumber
import requests


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

Content = Union[str, Tuple[str, ...]]


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class FetchCache:
    """
    url -> raw content, no eviction.

    Content is assumed static for the lifetime of the process, nothing ever
    invalidates an entry. A fresh process starts with an empty cache.
    """

    def __init__(self) -> None:
        self._contents: Dict[str, Content] = {}

    def __contains__(self, url: str) -> bool:
        return url in self._contents

    def __len__(self) -> int:
        return len(self._contents)

    def get(self, url: str) -> Optional[Content]:
        return self._contents.get(url)

    def put(self, url: str, content: Content) -> None:
        self._contents[url] = content

    def clear(self) -> None:
        self._contents.clear()


# Process-wide default cache
PAGE_CACHE = FetchCache()


# ---------------------------------------------------------------------------
# PDF text fragments
# ---------------------------------------------------------------------------


def extract_pdf_tokens(data: bytes) -> Tuple[str, ...]:
    """
    Extract the text fragments of a PDF, in reading order, page by page.

    Words that are only separated by single spaces stay together, so each
    table cell ends up as one fragment ("Fisica I", "1er Cuat 2021").
    """
    tokens = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            for word in page.extract_words(keep_blank_chars=True, use_text_flow=True):
                tokens.append(" ".join(word["text"].split()))
    return tuple(tokens)


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


class PageFetcher:
    """
    Fetches endpoint paths relative to one back-end base URL.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        cache: FetchCache = PAGE_CACHE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.session = session or requests.Session()
        self.cache = cache
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _get(self, url: str) -> requests.Response:
        logger.debug("GET %s", url)
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def _post(self, url: str, data: Mapping[str, Any]) -> requests.Response:
        logger.debug("POST %s", url)
        resp = self.session.post(url, data=data, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    async def fetch_text(self, path: str) -> str:
        url = self.url_for(path)
        if url in self.cache:
            return self.cache.get(url)

        resp = await asyncio.to_thread(self._get, url)
        self.cache.put(url, resp.text)
        return resp.text

    async def fetch_pdf_tokens(self, path: str) -> Tuple[str, ...]:
        url = self.url_for(path)
        if url in self.cache:
            return self.cache.get(url)

        resp = await asyncio.to_thread(self._get, url)
        tokens = await asyncio.to_thread(extract_pdf_tokens, resp.content)
        self.cache.put(url, tokens)
        return tokens

    async def post_text(self, path: str, data: Mapping[str, Any]) -> str:
        resp = await asyncio.to_thread(self._post, self.url_for(path), data)
        return resp.text
