"""Import compatibility tests — verify all canonical paths resolve."""

from __future__ import annotations

import importlib

import pytest


# All public import paths that must work without a model runtime
_IMPORT_PATHS = [
    # Top-level
    "agrivoice",
    "agrivoice.api",
    # Core
    "agrivoice.core",
    "agrivoice.core.classifier",
    "agrivoice.core.constants",
    "agrivoice.core.env",
    "agrivoice.core.errors",
    "agrivoice.core.features",
    "agrivoice.core.keywords",
    "agrivoice.core.manager",
    "agrivoice.core.parser",
    "agrivoice.core.progress",
    "agrivoice.core.protocols",
    "agrivoice.core.router",
    "agrivoice.core.types",
    # Backends (runtime imports are deferred)
    "agrivoice.backends",
    "agrivoice.backends.local_server",
    "agrivoice.backends.mlx",
    "agrivoice.backends.storage",
    # Apps
    "agrivoice.apps",
    "agrivoice.apps.cli",
    "agrivoice.apps.config",
]


@pytest.mark.parametrize("path", _IMPORT_PATHS)
def test_import_resolves(path: str) -> None:
    """Each import path should resolve without error."""
    mod = importlib.import_module(path)
    assert mod is not None


def test_lazy_api_reexports() -> None:
    """agrivoice.X should resolve for all API names via __getattr__."""
    import agrivoice

    for name in (
        "VoiceRouter",
        "build_router",
        "clear_model_cache",
        "configure",
        "get_offline_llm_status",
        "get_router",
        "init_offline_llm",
        "is_offline_llm_ready",
        "route_from_transcript",
    ):
        assert hasattr(agrivoice, name), f"agrivoice.{name} not accessible"


def test_invalid_attr_raises() -> None:
    """Accessing a non-existent attribute should raise AttributeError."""
    import agrivoice

    with pytest.raises(AttributeError):
        _ = agrivoice.nonexistent_thing
