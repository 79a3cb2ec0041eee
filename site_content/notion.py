from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple
import logging

from .blocks import Block, blocks_to_html, first_paragraph
from .config import ContentConfig
from .exceptions import ConfigurationError, ContentError
from .fetcher import AUX_REVALIDATE, CONTENT_TAG, NotionClient
from .models import ContentItem, Kind, Locale
from .normalizer import page_to_item, sort_items


logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 30


def _base_filter(locale: Locale) -> List[Dict[str, Any]]:
    return [
        {"property": "Published", "checkbox": {"equals": True}},
        {"property": "Locale", "select": {"equals": locale.value}},
    ]


def _sorts(kind: Kind) -> List[Dict[str, str]]:
    if kind == Kind.NEWS:
        return [{"property": "Date", "direction": "descending"}]
    return [{"timestamp": "last_edited_time", "direction": "descending"}]


class NotionSource:
    """
    Serve content from Notion data sources.

    `data_source_ids` memoizes database id -> data source id for the lifetime of the
    owning service. It only ever grows and holds one entry per configured database.
    """

    def __init__(
        self,
        client: NotionClient,
        config: ContentConfig,
        data_source_ids: Optional[Dict[str, str]] = None,
    ) -> None:
        self.client = client
        self.config = config
        self.data_source_ids = data_source_ids if data_source_ids is not None else {}

    def resolve_data_source_id(self, kind: Kind) -> str:
        configured = self.config.data_source_id(kind)
        if configured:
            return configured

        db_id = self.config.database_id(kind)
        if not db_id:
            prefix = f"NOTION_{kind.value.upper()}"
            raise ConfigurationError(f"Neither {prefix}_DS nor {prefix}_DB provided")

        cached = self.data_source_ids.get(db_id)
        if cached:
            return cached

        logger.debug("Resolving data source for database %s", db_id)
        db = self.client.get(f"databases/{db_id}", revalidate=AUX_REVALIDATE, tag=CONTENT_TAG)
        sources = db.get("data_sources") or []
        ds_id = sources[0].get("id") if sources and isinstance(sources[0], dict) else None
        if not ds_id:
            raise ContentError(f"No data source found for database {db_id}")
        self.data_source_ids[db_id] = ds_id
        return ds_id

    def _query(self, kind: Kind, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        ds_id = self.resolve_data_source_id(kind)
        data = self.client.post(f"data_sources/{ds_id}/query", payload, tag=kind.value)
        results = data.get("results") or []
        return [r for r in results if isinstance(r, dict)]

    def list_items(self, kind: Kind, locale: Locale) -> List[ContentItem]:
        payload = {
            "filter": {"and": _base_filter(locale)},
            "sorts": _sorts(kind),
            "page_size": LIST_PAGE_SIZE,
        }
        pages = self._query(kind, payload)
        logger.debug("Notion returned %d %s pages for %s", len(pages), kind.value, locale.value)
        items = []
        for p in pages:
            try:
                items.append(page_to_item(p, kind))
            except ValueError as e:
                logger.warning("Skipping malformed %s page: %s", kind.value, e)
        return sort_items(kind, items)

    def get_item(self, kind: Kind, locale: Locale, slug: str) -> Optional[ContentItem]:
        payload = {
            "filter": {
                "and": _base_filter(locale) + [
                    {"property": "Slug", "rich_text": {"equals": slug}},
                ]
            },
            "page_size": 1,
        }
        pages = self._query(kind, payload)
        if not pages:
            return None

        try:
            item = page_to_item(pages[0], kind)
        except ValueError as e:
            logger.warning("Skipping malformed %s page for slug %r: %s", kind.value, slug, e)
            return None
        html, first_para = self.fetch_blocks_html(item.id, tag=kind.value)
        return replace(item, html=html, excerpt=item.excerpt or first_para)

    def fetch_blocks(self, page_id: str, *, tag: str = CONTENT_TAG) -> List[Block]:
        """Fetch all top-level child blocks of a page, following cursors one page at a time."""
        blocks: List[Block] = []
        cursor: Optional[str] = None
        pages = 0
        while True:
            if pages >= self.config.max_block_pages:
                logger.warning(
                    "Stopped fetching blocks for %s after %d pages; content is truncated",
                    page_id, pages,
                )
                break
            params = {"start_cursor": cursor} if cursor else None
            res = self.client.get(
                f"blocks/{page_id}/children",
                params=params,
                tag=tag,
                revalidate=self.client.revalidate,
            )
            pages += 1
            blocks.extend(b for b in res.get("results") or [] if isinstance(b, dict))
            cursor = res.get("next_cursor") if res.get("has_more") else None
            if not cursor:
                break
        return blocks

    def fetch_blocks_html(self, page_id: str, *, tag: str = CONTENT_TAG) -> Tuple[str, Optional[str]]:
        blocks = self.fetch_blocks(page_id, tag=tag)
        return blocks_to_html(blocks), first_paragraph(blocks)
