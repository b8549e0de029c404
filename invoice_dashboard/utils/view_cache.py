"""In-process cache for list views, invalidated after invoice mutations."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional

from flask import current_app

INVOICES_TAG = "/dashboard/invoices"
INVALIDATION_EVENT = "views_invalidated"
DEFAULT_MAX_ENTRIES_PER_TAG = 128


class ViewCache:
    """Thread-safe ``tag -> {key -> value}`` store.

    Each tag keeps at most ``max_entries_per_tag`` keys, evicting the least
    recently used. Invalidating a tag drops all of its entries, bumps the
    tag's generation so loads already in flight are not stored, and
    broadcasts :data:`INVALIDATION_EVENT` so open pages showing that view can
    reload. The broadcast is fire-and-forget: callers do not wait for clients.
    """

    def __init__(
        self, socketio=None, max_entries_per_tag: int = DEFAULT_MAX_ENTRIES_PER_TAG
    ) -> None:
        self.socketio = socketio
        self.max_entries_per_tag = max_entries_per_tag
        self._entries: Dict[str, "OrderedDict[Hashable, Any]"] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    def _store_unlocked(self, tag: str, key: Hashable, value: Any) -> None:
        bucket = self._entries.setdefault(tag, OrderedDict())
        bucket[key] = value
        bucket.move_to_end(key)
        while len(bucket) > self.max_entries_per_tag:
            bucket.popitem(last=False)

    # ------------------------------------------------------------------
    def get(self, tag: str, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            bucket = self._entries.get(tag)
            if bucket is None or key not in bucket:
                return default
            bucket.move_to_end(key)
            return bucket[key]

    # ------------------------------------------------------------------
    def set(self, tag: str, key: Hashable, value: Any) -> None:
        with self._lock:
            self._store_unlocked(tag, key, value)

    # ------------------------------------------------------------------
    def get_or_set(self, tag: str, key: Hashable, loader: Callable[[], Any]) -> Any:
        """Return the cached value or store the result of ``loader()``.

        ``loader`` runs outside the lock. Its result is still returned but is
        not stored when ``tag`` was invalidated while it ran.
        """
        with self._lock:
            bucket = self._entries.get(tag)
            if bucket is not None and key in bucket:
                bucket.move_to_end(key)
                return bucket[key]
            generation = self._generations.get(tag, 0)
        value = loader()
        with self._lock:
            if self._generations.get(tag, 0) == generation:
                self._store_unlocked(tag, key, value)
        return value

    # ------------------------------------------------------------------
    def invalidate(self, tag: str) -> None:
        with self._lock:
            self._entries.pop(tag, None)
            self._generations[tag] = self._generations.get(tag, 0) + 1
        if self.socketio is not None:
            self.socketio.emit(INVALIDATION_EVENT, {"tag": tag})

    # ------------------------------------------------------------------
    def __contains__(self, tag: str) -> bool:
        with self._lock:
            return bool(self._entries.get(tag))


def get_view_cache(app=None) -> Optional[ViewCache]:
    """Return the application's :class:`ViewCache`."""
    app = app or current_app._get_current_object()
    return app.extensions.get("view_cache")
