from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging

import frontmatter
import yaml
from markdown_it import MarkdownIt

from .models import ContentItem, Kind, Locale
from .normalizer import document_to_item, sort_items


logger = logging.getLogger(__name__)

_md = MarkdownIt("commonmark")


def render_markdown(content: str) -> str:
    return _md.render(content)


def parse_document(raw: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a Markdown document into (front matter, body).

    Malformed or non-mapping front matter is logged and treated as empty.
    """
    try:
        post = frontmatter.loads(raw)
    except (yaml.YAMLError, ValueError) as exc:
        logger.warning("Failed to parse front matter: %s", exc)
        return {}, raw

    metadata = post.metadata
    if not isinstance(metadata, dict):
        logger.warning("Front matter is not a mapping: %s", type(metadata).__name__)
        metadata = {}
    return dict(metadata), post.content


def is_published(metadata: Dict[str, Any]) -> bool:
    # Files are published unless they opt out explicitly.
    return metadata.get("published") is not False


class MarkdownSource:
    """
    Serve content from `<root>/<kind>/<locale>/*.md`.

    Every file is parsed and rendered on each call; there is no caching.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def folder(self, kind: Kind, locale: Locale) -> Path:
        return self.root / kind.value / locale.value

    def list_items(self, kind: Kind, locale: Locale) -> List[ContentItem]:
        base = self.folder(kind, locale)
        if not base.is_dir():
            logger.debug("No content directory at %s", base)
            return []

        items = []
        for path in sorted(base.glob("*.md")):
            if not path.is_file():
                continue
            try:
                raw = path.read_text(encoding="utf-8")
                modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            except (UnicodeDecodeError, OSError) as e:
                logger.warning("Skipping unreadable file %s: %s", path, e)
                continue
            metadata, body = parse_document(raw)
            if not is_published(metadata):
                continue
            try:
                items.append(document_to_item(path.name, metadata, render_markdown(body), kind, modified))
            except ValueError as e:
                logger.warning("Skipping %s: %s", path, e)
        return sort_items(kind, items)

    def get_item(self, kind: Kind, locale: Locale, slug: str) -> Optional[ContentItem]:
        for item in self.list_items(kind, locale):
            if item.slug == slug:
                return item
        return None
