from __future__ import annotations

from typing import Any, Dict, Optional
import json
import logging

import httpx

from .cache import RevalidatingCache
from .config import DEFAULT_API_URL, DEFAULT_NOTION_VERSION, HOUR
from .exceptions import ConfigurationError, FetchError, UpstreamError


logger = logging.getLogger(__name__)

# Window for lookups that are not content themselves (database -> data source).
AUX_REVALIDATE = 300
CONTENT_TAG = "content"


class NotionClient:
    """
    Thin authenticated client for the Notion REST API.

    Every call goes through a `RevalidatingCache` keyed by method, URL, query params
    and JSON body. Non-success responses raise `UpstreamError`; nothing is retried.
    """

    def __init__(
        self,
        token: Optional[str],
        *,
        version: str = DEFAULT_NOTION_VERSION,
        base_url: str = DEFAULT_API_URL,
        revalidate: int = HOUR,
        timeout_sec: float = 10.0,
        cache: Optional[RevalidatingCache] = None,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.token = token
        self.version = version
        self.base_url = base_url.rstrip("/")
        self.revalidate = revalidate
        self._owns_cache = cache is None
        self.cache = cache if cache is not None else RevalidatingCache()
        self._owns_http = http is None
        self._http = http or httpx.Client(timeout=timeout_sec)

    def __enter__(self) -> "NotionClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()
        if self._owns_cache:
            self.cache.close()

    def _headers(self, *, json_body: bool) -> Dict[str, str]:
        if not self.token:
            raise ConfigurationError("NOTION_TOKEN missing")
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.version,
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def post(
        self,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        tag: str = CONTENT_TAG,
        revalidate: Optional[int] = None,
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            path,
            body=body or {},
            tag=tag,
            revalidate=self.revalidate if revalidate is None else revalidate,
        )

    def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        tag: str = CONTENT_TAG,
        revalidate: int = AUX_REVALIDATE,
    ) -> Dict[str, Any]:
        return self._request("GET", path, params=params, tag=tag, revalidate=revalidate)

    def me(self) -> Dict[str, Any]:
        """Return the bot user the token authenticates as."""
        return self.get("users/me", revalidate=0)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        tag: str,
        revalidate: int,
    ) -> Dict[str, Any]:
        headers = self._headers(json_body=body is not None)
        url = self.url(path)
        key = (
            method,
            url,
            tuple(sorted((params or {}).items())),
            json.dumps(body, sort_keys=True) if body is not None else None,
        )
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s %s", method, url)
            return cached

        logger.debug("Fetching %s %s params=%s", method, url, params)
        try:
            res = self._http.request(method, url, params=params, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise FetchError(f"Notion {method} failed: {url} ({e})") from e

        if not res.is_success:
            logger.error("Notion %s %s returned %s", method, url, res.status_code)
            raise UpstreamError(method, url, res.status_code, res.text)

        try:
            data = res.json()
        except ValueError as e:
            raise FetchError(f"Notion {method} returned invalid JSON: {url} ({e})") from e
        self.cache.set(key, data, revalidate=revalidate, tag=tag)
        return data
