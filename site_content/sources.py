from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from .config import ContentConfig
from .fetcher import NotionClient
from .markdown import MarkdownSource
from .models import ContentItem, Kind, Locale
from .notion import NotionSource


class ContentSource(Protocol):
    def list_items(self, kind: Kind, locale: Locale) -> List[ContentItem]:  # pragma: no cover - interface
        ...

    def get_item(self, kind: Kind, locale: Locale, slug: str) -> Optional[ContentItem]:  # pragma: no cover - interface
        ...


def build_sources(
    config: ContentConfig,
    *,
    client: NotionClient,
    data_source_ids: Dict[str, str],
) -> Dict[Kind, ContentSource]:
    """
    Pick the source for every kind once, from configuration alone.

    With USE_NOTION on, Notion serves every kind even if the token or ids are missing;
    those calls then raise ConfigurationError instead of falling back to Markdown.
    """
    source: ContentSource
    if config.remote_enabled:
        source = NotionSource(client, config, data_source_ids)
    else:
        source = MarkdownSource(config.content_dir)
    return {kind: source for kind in Kind}
