"""Artifact stores used for model bookkeeping and cache clearing.

HubBlobCache views the Hugging Face hub cache as named blobs (one per
repo). JsonKeyValueStore keeps small records in a JSON file.
"""

import json
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from agrivoice.core.env import LOGGER


class HubBlobCache:
    """Enumerate and delete cached hub repos by repo id.

    The hub cache is shared with other tools, so only *repo_ids* (the
    models this app is configured to use) are ever listed or deleted.
    """

    def __init__(
        self, cache_dir: str | None = None, *, repo_ids: Iterable[str] = ()
    ) -> None:
        self._cache_dir = cache_dir
        self.repo_ids = frozenset(repo_ids)

    def _scan(self) -> Any:
        from huggingface_hub import scan_cache_dir
        from huggingface_hub.utils import CacheNotFound

        try:
            return scan_cache_dir(self._cache_dir)
        except CacheNotFound:
            return None

    def names(self) -> list[str]:
        info = self._scan()
        if info is None:
            return []
        return [repo.repo_id for repo in info.repos if repo.repo_id in self.repo_ids]

    def delete(self, name: str) -> None:
        if name not in self.repo_ids:
            LOGGER.debug("Leaving %s: not one of our models", name)
            return
        info = self._scan()
        if info is None:
            return
        hashes = [
            rev.commit_hash
            for repo in info.repos
            if repo.repo_id == name
            for rev in repo.revisions
        ]
        if not hashes:
            return
        strategy = info.delete_revisions(*hashes)
        LOGGER.info("Freeing %s from %s", strategy.expected_freed_size_str, name)
        strategy.execute()


class JsonKeyValueStore:
    """Small persistent mapping backed by one JSON file.

    Writes go through a temp file and ``os.replace`` so a crash never
    leaves a half-written store.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def keys(self) -> Iterable[str]:
        with self._lock:
            return list(self._read())

    def get(self, key: str) -> Any:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
