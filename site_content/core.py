from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional, Union
import logging

from .cache import RevalidatingCache
from .config import ContentConfig
from .fetcher import NotionClient
from .models import ContentItem, Kind, Locale
from .sources import ContentSource, build_sources


logger = logging.getLogger(__name__)

LocaleLike = Union[Locale, str]
KindLike = Union[Kind, str]


class ContentService:
    """
    High-level API: list and look up localized news/info articles.

    Pipeline: select source (config) → query → normalize → sort → strip bodies from lists

    The service owns the long-lived state: the HTTP client, the response cache and the
    database -> data source memo. Create one per process and share it between requests.
    """

    def __init__(
        self,
        config: Optional[ContentConfig] = None,
        *,
        client: Optional[NotionClient] = None,
        cache: Optional[RevalidatingCache] = None,
    ) -> None:
        self.config = config or ContentConfig()
        if client is not None and cache is not None:
            raise ValueError("Pass either client or cache, not both: a given client brings its own cache")
        self._owns_cache = client is None and cache is None
        if client is None:
            if cache is None:
                cache = RevalidatingCache(
                    self.config.cache_dir,
                    size_limit=self.config.cache_size_mb * 1024 * 1024,
                )
            client = NotionClient(
                self.config.token,
                version=self.config.notion_version,
                base_url=self.config.api_url,
                revalidate=self.config.revalidate,
                timeout_sec=self.config.timeout_sec,
                cache=cache,
            )
        self.client = client
        self.cache = client.cache
        self.data_source_ids: Dict[str, str] = {}
        self.sources: Dict[Kind, ContentSource] = build_sources(
            self.config, client=self.client, data_source_ids=self.data_source_ids
        )
        if self.config.remote_enabled:
            for kind in Kind:
                missing = self.config.missing_remote_settings(kind)
                if missing:
                    logger.warning("USE_NOTION is on but %s is not set; %s requests will fail",
                                   ", ".join(missing), kind.value)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "ContentService":
        return cls(ContentConfig.from_env(), **kwargs)

    def __enter__(self) -> "ContentService":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()
        if self._owns_cache:
            self.cache.close()

    def list_items(self, kind: KindLike, locale: LocaleLike) -> List[ContentItem]:
        kind, locale = Kind(kind), Locale(locale)
        items = self.sources[kind].list_items(kind, locale)
        # Bodies are only part of detail results.
        return [replace(i, html=None) if i.html is not None else i for i in items]

    def get_item(self, kind: KindLike, locale: LocaleLike, slug: str) -> Optional[ContentItem]:
        kind, locale = Kind(kind), Locale(locale)
        item = self.sources[kind].get_item(kind, locale, slug)
        if item is None:
            logger.debug("No %s item %r for %s", kind.value, slug, locale.value)
            return None
        if item.html is None:
            item = replace(item, html="")
        return item

    def list_news(self, locale: LocaleLike) -> List[ContentItem]:
        return self.list_items(Kind.NEWS, locale)

    def list_info(self, locale: LocaleLike) -> List[ContentItem]:
        return self.list_items(Kind.INFO, locale)

    def latest_news_title(self, locale: LocaleLike) -> Optional[str]:
        items = self.list_news(locale)
        return items[0].title if items else None

    def get_news_detail(self, locale: LocaleLike, slug: str) -> Optional[ContentItem]:
        return self.get_item(Kind.NEWS, locale, slug)

    def get_info_detail(self, locale: LocaleLike, slug: str) -> Optional[ContentItem]:
        return self.get_item(Kind.INFO, locale, slug)

    def revalidate_tag(self, tag: str) -> int:
        """Invalidate cached Notion responses tagged `tag` ("news", "info" or "content")."""
        dropped = self.cache.revalidate_tag(tag)
        logger.info("Revalidated %r (%d cached responses dropped)", tag, dropped)
        return dropped
