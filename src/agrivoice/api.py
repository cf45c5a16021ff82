"""Public API for agrivoice voice routing.

Backend modules are imported lazily, so ``import agrivoice.api`` is safe
without MLX or litellm present.

Typical usage::

    import asyncio
    from agrivoice.api import init_offline_llm, route_from_transcript

    async def main():
        await init_offline_llm()
        decision = await route_from_transcript("will it rain tomorrow", "english")
        print(decision.target_id)

    asyncio.run(main())

The module-level functions share one lazily built default VoiceRouter.
Applications that want explicit ownership build their own with
:func:`build_router` and call its methods directly.
"""

from __future__ import annotations

from pathlib import Path

from agrivoice.apps.config import AgrivoiceConfig, BackendConfig, load_config
from agrivoice.core.constants import DEFAULT_LANGUAGE, DEFAULT_STATE_FILE
from agrivoice.core.env import LOGGER
from agrivoice.core.manager import InferenceBackendManager
from agrivoice.core.parser import IntentParser
from agrivoice.core.progress import ProgressCallback
from agrivoice.core.protocols import InferenceBackend, LoadConfig
from agrivoice.core.router import VoiceRouter
from agrivoice.core.types import StatusSnapshot, VoiceDecision

_default_router: VoiceRouter | None = None


def build_backend(config: BackendConfig) -> InferenceBackend | None:
    """Instantiate the backend named by ``config.kind`` (None for "none")."""
    if config.kind == "none":
        return None
    if config.kind == "litellm":
        from agrivoice.backends.local_server import LitellmBackend

        return LitellmBackend(config.catalog, api_base=config.api_base)

    from agrivoice.backends.mlx import MlxBackend

    return MlxBackend(config.catalog, cache_dir=config.cache_dir)


def build_router(
    config: AgrivoiceConfig | None = None,
    *,
    backend: InferenceBackend | None = None,
) -> VoiceRouter:
    """Wire a VoiceRouter from configuration.

    Args:
        config: Loaded configuration (defaults when omitted).
        backend: Overrides the backend built from ``config.backend``.

    Returns:
        A router whose backend is still uninitialized.
    """
    from agrivoice.backends.storage import HubBlobCache, JsonKeyValueStore

    config = config or AgrivoiceConfig()
    backend_config = config.backend
    data_dir = Path(backend_config.data_dir).expanduser()

    manager = InferenceBackendManager(
        backend if backend is not None else build_backend(backend_config),
        candidates=backend_config.candidates,
        load_timeout=backend_config.load_timeout,
        fallback_count=backend_config.fallback_count,
        load_config=LoadConfig(
            cache_dir=backend_config.cache_dir,
            local_files_only=backend_config.local_files_only,
        ),
        blob_cache=(
            HubBlobCache(
                backend_config.cache_dir,
                repo_ids=(*backend_config.candidates, *backend_config.catalog),
            )
            if backend_config.kind == "mlx"
            else None
        ),
        kv_store=JsonKeyValueStore(data_dir / DEFAULT_STATE_FILE),
    )
    parser = IntentParser(
        manager,
        temperature=config.parser.temperature,
        max_tokens=config.parser.max_tokens,
        completion_timeout=config.parser.completion_timeout,
    )
    return VoiceRouter(manager, parser=parser, threshold=config.router.threshold)


def get_router() -> VoiceRouter:
    """Return the default router, building it from the config file once."""
    global _default_router
    if _default_router is None:
        try:
            config = load_config()
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable config file: %s", exc)
            config = AgrivoiceConfig()
        _default_router = build_router(config)
    return _default_router


def configure(router: VoiceRouter | None) -> None:
    """Install *router* as the default (None drops it)."""
    global _default_router
    _default_router = router


async def init_offline_llm(on_progress: ProgressCallback | None = None) -> bool:
    """Begin or await backend readiness.

    True means AI-assisted parsing is available; False means keyword-only
    mode will be used.
    """
    return await get_router().initialize(on_progress)


async def route_from_transcript(
    transcript: str, language: str | None = DEFAULT_LANGUAGE
) -> VoiceDecision:
    """Route one transcript to a decision. Never raises."""
    return await get_router().route(transcript, language)


def get_offline_llm_status() -> StatusSnapshot:
    return get_router().status()


def is_offline_llm_ready() -> bool:
    return get_router().is_ready()


async def clear_model_cache() -> None:
    """Delete cached model artifacts and reset the backend."""
    await get_router().clear_cache()
