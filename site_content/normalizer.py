from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .blocks import plain_text
from .models import ContentItem, Kind


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _file_url(entry: Any) -> Optional[str]:
    """URL of a Notion file object, either externally linked or hosted by Notion."""
    entry = _dict(entry)
    ftype = entry.get("type")
    if ftype not in ("external", "file"):
        return None
    url = _dict(entry.get(ftype)).get("url")
    return url if isinstance(url, str) and url else None


def cover_url(page: Mapping[str, Any]) -> Optional[str]:
    """
    Resolve a page's cover image.
    Priority: page cover -> first entry of the `Files` property -> None.
    """
    url = _file_url(page.get("cover"))
    if url:
        return url
    files = _dict(_dict(page.get("properties")).get("Files")).get("files")
    if isinstance(files, list) and files:
        return _file_url(files[0])
    return None


def fallback_slug(page_id: str) -> str:
    return page_id.replace("-", "")


def page_to_item(page: Mapping[str, Any], kind: Kind) -> ContentItem:
    """
    Convert a Notion page object into a ContentItem.
    Reads properties: Title (title), Slug (rich_text), Excerpt (rich_text), Date (date, news only).
    Missing or malformed properties degrade to None / fallbacks.
    Raises ValueError when the page has no id, since neither slug nor body can be derived.
    """
    page_id = str(page.get("id") or "").strip()
    if not page_id:
        raise ValueError("Notion page lacks an id")
    props = _dict(page.get("properties"))

    title = plain_text(_dict(props.get("Title")).get("title")).strip()
    slug = plain_text(_dict(props.get("Slug")).get("rich_text")).strip()
    excerpt = plain_text(_dict(props.get("Excerpt")).get("rich_text")).strip()

    item_date = None
    if kind == Kind.NEWS:
        start = _dict(_dict(props.get("Date")).get("date")).get("start")
        item_date = start if isinstance(start, str) and start else None

    last_edited = page.get("last_edited_time")

    return ContentItem(
        id=page_id,
        title=title or page_id,
        slug=slug or fallback_slug(page_id) or page_id,
        date=item_date,
        excerpt=excerpt or None,
        cover_url=cover_url(page),
        last_edited=last_edited if isinstance(last_edited, str) else None,
    )


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def document_to_item(
    filename: str,
    metadata: Mapping[str, Any],
    html: str,
    kind: Kind,
    modified: Optional[datetime] = None,
) -> ContentItem:
    """
    Convert a Markdown file (front matter + rendered body) into a ContentItem.
    Title falls back to the filename, slug to the filename without its extension.
    Raises ValueError when no slug can be derived (e.g. a file named ".md").
    """
    stem = (filename.rsplit(".", 1)[0] if "." in filename else filename).strip()
    slug = _text(metadata.get("slug")) or stem
    if not slug:
        raise ValueError(f"Cannot derive a slug for {filename!r}")
    if kind == Kind.NEWS:
        excerpt = _text(metadata.get("description")) or _text(metadata.get("subtitle"))
    else:
        excerpt = _text(metadata.get("subtitle")) or _text(metadata.get("description"))

    return ContentItem(
        id=filename,
        title=_text(metadata.get("title")) or filename,
        slug=slug,
        date=_text(metadata.get("date")) if kind == Kind.NEWS else None,
        excerpt=excerpt,
        cover_url=_text(metadata.get("cover")),
        html=html,
        last_edited=modified.isoformat() if modified else None,
    )


def sort_items(kind: Kind, items: Iterable[ContentItem]) -> List[ContentItem]:
    """News newest `date` first (missing dates last); info most recently edited first."""
    if kind == Kind.NEWS:
        return sorted(items, key=lambda x: x.date or "", reverse=True)
    return sorted(items, key=lambda x: x.last_edited or "", reverse=True)
