"""Tests for agrivoice.api — default router wiring and module-level calls."""

from __future__ import annotations

import asyncio

import pytest

from agrivoice import api
from agrivoice.apps.config import AgrivoiceConfig, BackendConfig
from agrivoice.backends.local_server import LitellmBackend
from agrivoice.backends.mlx import MlxBackend
from agrivoice.backends.storage import JsonKeyValueStore
from agrivoice.core.router import VoiceRouter

from .conftest import FakeBackend, FakeKeyValueStore, make_manager


@pytest.fixture(autouse=True)
def reset_default_router():
    api.configure(None)
    yield
    api.configure(None)


def _offline_config(tmp_path) -> AgrivoiceConfig:
    return AgrivoiceConfig(backend=BackendConfig(kind="none", data_dir=str(tmp_path)))


class TestBuildBackend:
    def test_none(self) -> None:
        assert api.build_backend(BackendConfig(kind="none")) is None

    def test_litellm(self) -> None:
        backend = api.build_backend(
            BackendConfig(kind="litellm", catalog=("ollama/qwen2.5:0.5b",))
        )
        assert isinstance(backend, LitellmBackend)
        assert backend.available_models() == ["ollama/qwen2.5:0.5b"]

    def test_mlx(self) -> None:
        assert isinstance(api.build_backend(BackendConfig()), MlxBackend)


class TestBuildRouter:
    def test_without_backend_stays_in_keyword_mode(self, tmp_path) -> None:
        router = api.build_router(_offline_config(tmp_path))
        assert asyncio.run(router.initialize()) is False
        status = router.status()
        assert status.mode == "error"
        assert "no inference backend" in status.error

        decision = asyncio.run(router.route("show me the news", "english"))
        assert decision.target_id == "news"

    def test_hub_cache_limited_to_configured_models(self, tmp_path) -> None:
        config = AgrivoiceConfig(
            backend=BackendConfig(
                candidates=("mlx-community/a",),
                catalog=("mlx-community/a", "mlx-community/b"),
                data_dir=str(tmp_path),
            )
        )
        router = api.build_router(config)
        assert router.manager._blob_cache.repo_ids == {"mlx-community/a", "mlx-community/b"}

    def test_injected_backend_and_state_file(self, tmp_path) -> None:
        config = AgrivoiceConfig(
            backend=BackendConfig(
                kind="none", candidates=("m1",), data_dir=str(tmp_path)
            )
        )
        router = api.build_router(config, backend=FakeBackend())
        assert asyncio.run(router.initialize()) is True
        store = JsonKeyValueStore(tmp_path / "state.json")
        assert store.get("agrivoice:model:m1") is not None


class TestModuleFunctions:
    def test_configured_router_is_used(self) -> None:
        router = VoiceRouter(make_manager(kv_store=FakeKeyValueStore()))
        api.configure(router)
        assert api.get_router() is router
        assert api.is_offline_llm_ready() is False
        assert api.get_offline_llm_status().mode == "keywords"

        assert asyncio.run(api.init_offline_llm()) is True
        assert api.is_offline_llm_ready() is True
        assert api.get_offline_llm_status().model_id == "m1"

        decision = asyncio.run(api.route_from_transcript("weather"))
        assert decision.target_id == "weather"
        assert decision.language == "english"

        asyncio.run(api.clear_model_cache())
        assert api.is_offline_llm_ready() is False

    def test_default_router_built_once(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("AGRIVOICE_CONFIG_DIR", str(tmp_path))
        (tmp_path / "config.json").write_text(
            '{"backend": {"kind": "none", "data_dir": "%s"}}' % tmp_path.as_posix(),
            encoding="utf-8",
        )
        first = api.get_router()
        assert api.get_router() is first
        assert asyncio.run(api.init_offline_llm()) is False

    def test_unreadable_config_falls_back_to_defaults(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("AGRIVOICE_CONFIG_DIR", str(tmp_path))
        (tmp_path / "config.json").write_text("{oops", encoding="utf-8")
        router = api.get_router()
        assert router.threshold == 0.6
