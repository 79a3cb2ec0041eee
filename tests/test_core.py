"""Tests for the ContentService facade."""

import pytest
import respx

from conftest import API, INFO_DS, NEWS_DB, NEWS_DS, page, paragraph

from site_content import ConfigurationError, ContentConfig, ContentService
from site_content.markdown import MarkdownSource
from site_content.notion import NotionSource


def write(root, kind, locale, name, text):
    folder = root / kind / locale
    folder.mkdir(parents=True, exist_ok=True)
    (folder / name).write_text(text, encoding="utf-8")


@pytest.fixture
def markdown_service(tmp_path):
    write(tmp_path, "news", "fi", "vanha.md", "---\ntitle: Vanha\ndate: 2024-01-01\n---\nVanha uutinen")
    write(tmp_path, "news", "fi", "uusi.md", "---\ntitle: Uusi\ndate: 2025-01-01\ndescription: Tuore\n---\n**Uusi**")
    write(tmp_path, "info", "en", "about.md", "---\ntitle: About\nsubtitle: Who we are\n---\nHello")
    with ContentService(ContentConfig(content_dir=tmp_path)) as service:
        yield service


@pytest.fixture
def notion_service(notion_config, client):
    return ContentService(notion_config, client=client)


def test_markdown_is_used_when_toggle_is_off(markdown_service):
    assert all(isinstance(s, MarkdownSource) for s in markdown_service.sources.values())


def test_list_has_no_bodies(markdown_service):
    items = markdown_service.list_news("fi")
    assert [i.slug for i in items] == ["uusi", "vanha"]
    assert all(i.html is None for i in items)
    assert items[0].excerpt == "Tuore"


def test_detail_has_body(markdown_service):
    item = markdown_service.get_news_detail("fi", "uusi")
    assert item.html == "<p><strong>Uusi</strong></p>\n"
    assert markdown_service.get_info_detail("en", "about").html == "<p>Hello</p>\n"


def test_detail_not_found_is_none(markdown_service):
    assert markdown_service.get_news_detail("fi", "missing") is None
    assert markdown_service.get_info_detail("fi", "about") is None


def test_latest_news_title(markdown_service):
    assert markdown_service.latest_news_title("fi") == "Uusi"
    assert markdown_service.latest_news_title("en") is None


def test_list_info(markdown_service):
    [item] = markdown_service.list_info("en")
    assert item.title == "About"
    assert item.excerpt == "Who we are"


def test_unknown_locale_is_rejected(markdown_service):
    with pytest.raises(ValueError):
        markdown_service.list_news("sv")


def test_notion_is_used_for_every_kind(notion_service):
    sources = list(notion_service.sources.values())
    assert all(isinstance(s, NotionSource) for s in sources)
    assert sources[0] is sources[1]
    assert sources[0].data_source_ids is notion_service.data_source_ids


def test_misconfigured_notion_does_not_fall_back(tmp_path, caplog):
    write(tmp_path, "news", "fi", "local.md", "---\ntitle: Local\n---\nx")
    config = ContentConfig.from_env({"USE_NOTION": "true", "CONTENT_DIR": str(tmp_path)})
    with ContentService(config) as service:
        with pytest.raises(ConfigurationError):
            service.list_news("fi")
    assert "NOTION_TOKEN" in caplog.text


@respx.mock
def test_notion_detail_and_revalidation(notion_service):
    db = respx.get(f"{API}/databases/{NEWS_DB}").respond(json={"data_sources": [{"id": NEWS_DS}]})
    query = respx.post(f"{API}/data_sources/{NEWS_DS}/query").respond(
        json={"results": [page("n-1", title="Uutinen", slug="uutinen", date="2025-05-05")]}
    )
    blocks = respx.get(f"{API}/blocks/n-1/children").respond(
        json={"results": [paragraph("Teksti")], "has_more": False}
    )

    assert notion_service.latest_news_title("fi") == "Uutinen"
    assert notion_service.list_news("fi")[0].html is None
    assert query.call_count == 1

    detail = notion_service.get_news_detail("fi", "uutinen")
    assert detail.html == "<p>Teksti</p>"
    assert detail.excerpt == "Teksti"
    assert detail.date == "2025-05-05"

    assert notion_service.revalidate_tag("news") == 3
    notion_service.list_news("fi")
    assert query.call_count == 3
    assert blocks.call_count == 1
    assert db.call_count == 1


@respx.mock
def test_info_tag_leaves_news_cached(notion_service):
    news = respx.post(f"{API}/data_sources/{NEWS_DS}/query").respond(json={"results": []})
    info = respx.post(f"{API}/data_sources/{INFO_DS}/query").respond(json={"results": []})
    respx.get(f"{API}/databases/{NEWS_DB}").respond(json={"data_sources": [{"id": NEWS_DS}]})

    notion_service.list_news("en")
    notion_service.list_info("en")
    notion_service.revalidate_tag("info")
    notion_service.list_news("en")
    notion_service.list_info("en")

    assert news.call_count == 1
    assert info.call_count == 2


def test_client_and_cache_together_are_rejected(notion_config, client, cache):
    with pytest.raises(ValueError, match="either client or cache"):
        ContentService(notion_config, client=client, cache=cache)


def test_given_cache_is_used_by_the_built_client(notion_config, cache):
    service = ContentService(notion_config, cache=cache)
    assert service.cache is cache
    assert service.client.cache is cache
    service.close()
    cache.set("still-open", 1, revalidate=60)
    assert cache.get("still-open") == 1


def test_service_owned_cache_uses_configured_directory(tmp_path):
    config = ContentConfig(content_dir=tmp_path, cache_dir=tmp_path / "http-cache", cache_size_mb=1)
    with ContentService(config) as service:
        assert service.cache.directory == tmp_path / "http-cache"
        assert (tmp_path / "http-cache").is_dir()
