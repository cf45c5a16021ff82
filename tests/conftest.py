"""Shared test fixtures — no real model backend needed."""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from agrivoice.core.manager import InferenceBackendManager
from agrivoice.core.protocols import LoadConfig, SamplingParams
from agrivoice.core.router import VoiceRouter


class FakeEngine:
    """Engine stub returning canned completions and recording calls."""

    def __init__(self, model_id: str, response: str | Exception = "{}", delay: float = 0.0) -> None:
        self.model_id = model_id
        self.response = response
        self.delay = delay
        self.calls: list[tuple[list[dict[str, str]], SamplingParams]] = []

    def complete(self, messages: Sequence[dict[str, str]], params: SamplingParams) -> str:
        self.calls.append((list(messages), params))
        if self.delay:
            time.sleep(self.delay)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class FakeBackend:
    """Backend stub with a fixed catalog and scriptable load behavior."""

    def __init__(
        self,
        catalog: Sequence[str] = ("m1", "m2", "m3"),
        *,
        failures: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
        progress_steps: Sequence[float] = (0.5, 1.0),
        response: str | Exception = "{}",
    ) -> None:
        self.catalog = list(catalog)
        self.failures = dict(failures or {})
        self.delays = dict(delays or {})
        self.progress_steps = tuple(progress_steps)
        self.response = response
        self.catalog_calls = 0
        self.load_calls: list[str] = []
        self.engines: list[FakeEngine] = []
        self.active_loads = 0
        self.max_active_loads = 0
        self._lock = threading.Lock()

    def available_models(self) -> list[str]:
        self.catalog_calls += 1
        return list(self.catalog)

    def load(self, model_id: str, config: LoadConfig, on_progress: Callable[[float, str], None]) -> FakeEngine:
        self.load_calls.append(model_id)
        with self._lock:
            self.active_loads += 1
            self.max_active_loads = max(self.max_active_loads, self.active_loads)
        try:
            return self._load(model_id, on_progress)
        finally:
            with self._lock:
                self.active_loads -= 1

    def _load(self, model_id: str, on_progress: Callable[[float, str], None]) -> FakeEngine:
        for fraction in self.progress_steps:
            on_progress(fraction, f"Loading {model_id}")
        delay = self.delays.get(model_id, 0.0)
        if delay:
            time.sleep(delay)
        error = self.failures.get(model_id)
        if error is not None:
            raise error
        engine = FakeEngine(model_id, self.response)
        self.engines.append(engine)
        return engine


class BrokenCatalogBackend(FakeBackend):
    def available_models(self) -> list[str]:
        raise RuntimeError("catalog offline")


class FakeBlobCache:
    """In-memory named-blob cache."""

    def __init__(
        self,
        names: Sequence[str] = (),
        *,
        undeletable: Sequence[str] = (),
        on_delete: Callable[[str], None] | None = None,
    ) -> None:
        self.blobs = set(names)
        self.undeletable = set(undeletable)
        self.on_delete = on_delete
        self.deleted: list[str] = []

    def names(self) -> list[str]:
        return sorted(self.blobs)

    def delete(self, name: str) -> None:
        if name in self.undeletable:
            raise PermissionError(name)
        self.blobs.discard(name)
        self.deleted.append(name)
        if self.on_delete is not None:
            self.on_delete(name)


class FakeKeyValueStore:
    """In-memory key-value store."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = dict(data or {})

    def keys(self) -> list[str]:
        return list(self.data)

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


def make_manager(backend: FakeBackend | None = None, **kwargs: Any) -> InferenceBackendManager:
    kwargs.setdefault("candidates", ("m1", "m2"))
    kwargs.setdefault("load_timeout", 5.0)
    return InferenceBackendManager(backend if backend is not None else FakeBackend(), **kwargs)


def make_ready_router(response: str | Exception, **kwargs: Any) -> tuple[VoiceRouter, FakeBackend]:
    """Router whose backend has already loaded an engine answering *response*."""
    backend = FakeBackend(response=response)
    manager = make_manager(backend, **kwargs)
    assert asyncio.run(manager.initialize()) is True
    return VoiceRouter(manager), backend


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def manager(fake_backend: FakeBackend) -> InferenceBackendManager:
    return make_manager(fake_backend)
