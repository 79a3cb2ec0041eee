import time

import pytest

from site_content.cache import RevalidatingCache
from site_content.config import ContentConfig
from site_content.fetcher import NotionClient
from site_content.models import Kind
from site_content.notion import NotionSource

API = "https://api.notion.com/v1"
NEWS_DB = "news-db-id"
NEWS_DS = "news-ds-id"
INFO_DS = "info-ds-id"


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock(monkeypatch):
    """Freeze time.time(), which the cache uses for expiry, and let tests move it forward."""
    fake = FakeClock(time.time())
    monkeypatch.setattr(time, "time", fake)
    return fake


@pytest.fixture
def cache(tmp_path, clock):
    c = RevalidatingCache(tmp_path / "cache")
    yield c
    c.close()


@pytest.fixture
def notion_config(tmp_path):
    return ContentConfig(
        use_notion=True,
        token="secret-token",
        database_ids={Kind.NEWS: NEWS_DB},
        data_source_ids={Kind.INFO: INFO_DS},
        content_dir=tmp_path,
    )


@pytest.fixture
def client(cache):
    c = NotionClient("secret-token", cache=cache)
    yield c
    c.close()


@pytest.fixture
def source(client, notion_config):
    return NotionSource(client, notion_config, {})


def rich(text, **annotations):
    return {"plain_text": text, "annotations": annotations}


def page(page_id, *, title=None, slug=None, excerpt=None, date=None, **extra):
    props = {}
    if title is not None:
        props["Title"] = {"title": [rich(title)]}
    if slug is not None:
        props["Slug"] = {"rich_text": [rich(slug)]}
    if excerpt is not None:
        props["Excerpt"] = {"rich_text": [rich(excerpt)]}
    if date is not None:
        props["Date"] = {"date": {"start": date}}
    return {"id": page_id, "properties": props, **extra}


def paragraph(text, **annotations):
    return {"type": "paragraph", "paragraph": {"rich_text": [rich(text, **annotations)]}}
