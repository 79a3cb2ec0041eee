import logging
import sys

from site_content import ContentConfig, ContentError, Kind
from site_content.fetcher import NotionClient
from site_content.notion import NotionSource

# Reads the same .env as the site: NOTION_TOKEN plus NOTION_NEWS_DS/DB and NOTION_INFO_DS/DB.
logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

config = ContentConfig.from_env()

if not config.token:
    sys.exit("NOTION_TOKEN is not set. Check your .env file.")


def sample(source: NotionSource, kind: Kind) -> None:
    """Count published rows in the kind's data source (any locale)."""
    ds_id = source.resolve_data_source_id(kind)
    res = source.client.post(
        f"data_sources/{ds_id}/query",
        {
            "filter": {"and": [{"property": "Published", "checkbox": {"equals": True}}]},
            "sorts": [{"timestamp": "last_edited_time", "direction": "descending"}],
            "page_size": 5,
        },
        revalidate=0,
    )
    print(f"{kind.value.upper()} ({ds_id}) count: {len(res.get('results') or [])}")


with NotionClient(
    config.token,
    version=config.notion_version,
    base_url=config.api_url,
    timeout_sec=config.timeout_sec,
) as client:
    try:
        print("Authed as:", client.me().get("name"))
        source = NotionSource(client, config)
        for kind in Kind:
            sample(source, kind)
    except ContentError as e:
        sys.exit(f"Notion check failed: {e}")
