from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional
import os

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .models import Kind


HOUR = 60 * 60
DEFAULT_NOTION_VERSION = "2025-09-03"
DEFAULT_API_URL = "https://api.notion.com/v1"


def _number(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from e


@dataclass
class ContentConfig:
    use_notion: bool = False
    token: Optional[str] = None
    database_ids: Dict[Kind, str] = field(default_factory=dict)
    data_source_ids: Dict[Kind, str] = field(default_factory=dict)
    notion_version: str = DEFAULT_NOTION_VERSION
    revalidate: int = HOUR
    api_url: str = DEFAULT_API_URL
    timeout_sec: float = 10.0
    max_block_pages: int = 100
    content_dir: Path = Path("content")
    cache_dir: Optional[Path] = None
    cache_size_mb: int = 64

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ContentConfig":
        """
        Build a config from environment variables.

        When `env` is omitted, a `.env` file in the working directory is loaded first
        (existing variables win) and `os.environ` is read.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        def _get(key: str) -> Optional[str]:
            val = env.get(key)
            if val is None:
                return None
            val = val.strip()
            return val or None

        database_ids = {}
        data_source_ids = {}
        for kind in Kind:
            prefix = f"NOTION_{kind.value.upper()}"
            db = _get(f"{prefix}_DB")
            ds = _get(f"{prefix}_DS")
            if db:
                database_ids[kind] = db
            if ds:
                data_source_ids[kind] = ds

        cache_dir = _get("CONTENT_CACHE_DIR")
        return cls(
            use_notion=(_get("USE_NOTION") or "").lower() == "true",
            token=_get("NOTION_TOKEN"),
            database_ids=database_ids,
            data_source_ids=data_source_ids,
            notion_version=_get("NOTION_VERSION") or DEFAULT_NOTION_VERSION,
            revalidate=int(_number(env, "CONTENT_REVALIDATE", HOUR)),
            api_url=(_get("NOTION_API_URL") or DEFAULT_API_URL).rstrip("/"),
            timeout_sec=_number(env, "NOTION_TIMEOUT", 10.0),
            max_block_pages=int(_number(env, "NOTION_MAX_BLOCK_PAGES", 100)),
            content_dir=Path(_get("CONTENT_DIR") or "content"),
            cache_dir=Path(cache_dir) if cache_dir else None,
            cache_size_mb=int(_number(env, "CONTENT_CACHE_SIZE_MB", 64)),
        )

    @property
    def remote_enabled(self) -> bool:
        return self.use_notion

    def database_id(self, kind: Kind) -> Optional[str]:
        return self.database_ids.get(kind)

    def data_source_id(self, kind: Kind) -> Optional[str]:
        return self.data_source_ids.get(kind)

    def missing_remote_settings(self, kind: Kind) -> List[str]:
        """Names of the variables the Notion source still needs to serve `kind`."""
        missing = []
        if not self.token:
            missing.append("NOTION_TOKEN")
        if not self.database_id(kind) and not self.data_source_id(kind):
            prefix = f"NOTION_{kind.value.upper()}"
            missing.append(f"{prefix}_DS or {prefix}_DB")
        return missing
