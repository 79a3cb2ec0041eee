from __future__ import annotations

from pathlib import Path
from typing import Any, Hashable, Optional, Union
import logging
import shutil
import tempfile

import diskcache


logger = logging.getLogger(__name__)

DEFAULT_SIZE_LIMIT = 64 * 1024 * 1024


class RevalidatingCache:
    """
    Response cache with time-based expiry and tag invalidation, backed by diskcache.

    Entries are written with a `revalidate` window in seconds and one tag. Expired
    entries are never returned and are purged on every write; `size_limit` bounds the
    store. `revalidate_tag` drops every entry carrying the tag regardless of age.

    Without a `directory` the cache lives in a temporary directory that `close()` removes.
    """

    def __init__(
        self,
        directory: Optional[Union[str, Path]] = None,
        *,
        size_limit: int = DEFAULT_SIZE_LIMIT,
    ) -> None:
        self._tmpdir: Optional[str] = None
        if directory is None:
            self._tmpdir = tempfile.mkdtemp(prefix="site-content-cache-")
            directory = self._tmpdir
        self.directory = Path(directory)
        self._cache = diskcache.Cache(str(self.directory), size_limit=size_limit, tag_index=True)

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, key: Hashable) -> Optional[Any]:
        return self._cache.get(key)

    def set(self, key: Hashable, value: Any, *, revalidate: int, tag: Optional[str] = None) -> None:
        if revalidate <= 0:
            return
        self.purge_expired()
        self._cache.set(key, value, expire=revalidate, tag=tag)

    def purge_expired(self) -> int:
        """Remove entries whose window has passed. Returns the number removed."""
        return self._cache.expire()

    def revalidate_tag(self, tag: str) -> int:
        """Drop all entries tagged with `tag`. Returns the number of entries removed."""
        dropped = self._cache.evict(tag)
        logger.debug("Revalidated tag %r: dropped %d entries", tag, dropped)
        return dropped

    def clear(self) -> None:
        self._cache.clear()

    def close(self) -> None:
        self._cache.close()
        if self._tmpdir:
            shutil.rmtree(self._tmpdir, ignore_errors=True)
            self._tmpdir = None
