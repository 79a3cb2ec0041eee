from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Kind(str, Enum):
    NEWS = "news"
    INFO = "info"


class Locale(str, Enum):
    FI = "fi"
    EN = "en"


@dataclass(frozen=True)
class ContentItem:
    """
    Uniform article shape shared by the Markdown and Notion sources.

    WARNING: Do not change fields lightly. Page templates render these directly.
    `html` is only set on detail results; list results leave it as None.
    """
    id: str
    title: str
    slug: str
    date: Optional[str] = None
    excerpt: Optional[str] = None
    cover_url: Optional[str] = None
    html: Optional[str] = None
    last_edited: Optional[str] = None
