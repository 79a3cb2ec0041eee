"""
site_content

Content layer for the localized (fi/en) site: news and info articles from Notion or
local Markdown files, normalized into one item shape.

Core ideas:
- Input: configuration (USE_NOTION, NOTION_TOKEN, NOTION_*_DB / NOTION_*_DS, CONTENT_DIR)
- Process: select source → query (published, locale) → normalize → sort → render HTML for details
- Output: List[ContentItem] for lists, Optional[ContentItem] with `html` for details

Example
-------
from site_content import ContentService

with ContentService.from_env() as content:
    for item in content.list_news("fi"):
        print(item.date, item.slug, item.title)

    detail = content.get_news_detail("fi", "syysjuhla")
    if detail is not None:
        print(detail.html)

    # from a webhook once editors publish
    content.revalidate_tag("news")
"""
from .models import ContentItem, Kind, Locale
from .config import ContentConfig
from .core import ContentService
from .exceptions import ConfigurationError, ContentError, FetchError, UpstreamError

__all__ = [
    "ContentItem",
    "Kind",
    "Locale",
    "ContentConfig",
    "ContentService",
    "ContentError",
    "ConfigurationError",
    "FetchError",
    "UpstreamError",
]
