# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Expiring key/value cache for form schema metadata.

Two tiers: an in-memory dict for the life of the process, and JSON files
under ``<root>/<namespace>/`` shared between processes. Every value carries
an ``expires_at`` timestamp; an expired value is a miss and is removed.

Keys are composite strings ``caller;server;form``. Concurrent writers may both
populate the same key; the later write wins and the cost is one extra
backend round trip.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import time
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Seven days, in seconds
DEFAULT_EXPIRATION = 7 * 24 * 60 * 60
DEFAULT_NAMESPACE = "Remedy_Cache"
KEY_SEPARATOR = ";"


class SchemaCache:
    """
    Expiring two-tier cache.

    :param root: Directory holding namespace directories. None keeps the cache in memory only.
    :type root: str or None
    :param namespace: Sub-directory for this cache's files.
    :type namespace: str
    :param expiration: Lifetime of a stored value, in seconds.
    :type expiration: int
    :param enabled: When False every lookup misses and every store is skipped.
    :type enabled: bool
    """

    def __init__(
        self,
        root: Optional[str] = None,
        namespace: str = DEFAULT_NAMESPACE,
        expiration: int = DEFAULT_EXPIRATION,
        enabled: bool = True,
    ) -> None:
        self.root = root
        self.namespace = namespace
        self.expiration = int(expiration)
        self.enabled = enabled
        self._memory: Dict[str, Dict[str, Any]] = {}
        self._stats = {"hits": 0, "misses": 0, "sets": 0}

    @classmethod
    def from_config(cls, config) -> "SchemaCache":
        """Build a cache from a :class:`~remedy.core.config.RemedyConfig`."""
        return cls(
            root=config.cache_root,
            namespace=config.cache_namespace,
            expiration=config.cache_expiration,
            enabled=config.caching,
        )

    @staticmethod
    def key(caller: str, server: str, form: str) -> str:
        """Composite cache key for a form's schema."""
        return KEY_SEPARATOR.join((caller, server, form))

    @property
    def directory(self) -> Optional[str]:
        if not self.root:
            return None
        return os.path.join(self.root, self.namespace)

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def _path(self, key: str) -> Optional[str]:
        directory = self.directory
        if directory is None:
            return None
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return os.path.join(directory, f"{digest}.json")

    def get_value(self, key: str) -> Optional[Any]:
        """
        Look up ``key``; memory first, then disk.

        :return: The stored value, or None on a miss or when expired.
        :raises ValueError: If ``key`` is empty.
        """
        if not key:
            raise ValueError("no key offered")
        if not self.enabled:
            return None
        now = time.time()

        entry = self._memory.get(key)
        if entry is not None:
            if entry["expires_at"] > now:
                self._stats["hits"] += 1
                logger.debug("cache HIT (memory) %s", key)
                return entry["value"]
            del self._memory[key]

        path = self._path(key)
        if path is not None and os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    stored = json.load(fh)
            except (OSError, ValueError) as exc:
                logger.warning("unreadable cache file %s: %s", path, exc)
                stored = {}
            if stored and stored.get("key") == key and stored.get("expires_at", 0) > now:
                self._memory[key] = {"value": stored["value"], "expires_at": stored["expires_at"]}
                self._stats["hits"] += 1
                logger.debug("cache HIT (disk) %s", key)
                return stored["value"]
            if stored is not None:
                self._remove_file(path)

        self._stats["misses"] += 1
        logger.debug("cache MISS %s", key)
        return None

    def set_value(self, key: str, value: Any) -> bool:
        """
        Store ``value`` under ``key`` for :attr:`expiration` seconds.

        ``value`` must be JSON-serializable.

        :return: True if the value was stored.
        :raises ValueError: If ``key`` is empty.
        """
        if not key:
            raise ValueError("no key offered")
        if not self.enabled:
            return False
        expires_at = time.time() + self.expiration
        self._memory[key] = {"value": value, "expires_at": expires_at}
        self._stats["sets"] += 1
        logger.debug("cache SET %s", key)

        path = self._path(key)
        if path is None:
            return True
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=os.path.dirname(path), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({"key": key, "expires_at": expires_at, "value": value}, fh)
            os.replace(tmp, path)
        except OSError as exc:
            logger.warning("could not write cache file %s: %s", path, exc)
            return False
        return True

    def delete(self, key: str) -> None:
        """Drop ``key`` from both tiers."""
        self._memory.pop(key, None)
        path = self._path(key)
        if path is not None:
            self._remove_file(path)

    def clear(self) -> int:
        """
        Drop every value in this namespace.

        :return: Number of cache files removed.
        :rtype: int
        """
        self._memory.clear()
        directory = self.directory
        removed = 0
        if directory is None or not os.path.isdir(directory):
            return removed
        for name in os.listdir(directory):
            if name.endswith(".json"):
                self._remove_file(os.path.join(directory, name))
                removed += 1
        logger.info("cleared %d entries from %s", removed, directory)
        return removed

    @staticmethod
    def _remove_file(path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
