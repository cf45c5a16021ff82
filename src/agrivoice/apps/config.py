"""Application-level configuration.

Loaded from ``~/.config/agrivoice/config.json``; every key is optional.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agrivoice.core.constants import (
    DEFAULT_AI_THRESHOLD,
    DEFAULT_BACKEND_KIND,
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_DIR_ENV,
    DEFAULT_CONFIG_FILE,
    DEFAULT_DATA_DIR,
    DEFAULT_FALLBACK_COUNT,
    DEFAULT_LANGUAGE,
    DEFAULT_LOAD_TIMEOUT,
    DEFAULT_MODEL_CANDIDATES,
    DEFAULT_MODEL_CATALOG,
    DEFAULT_PARSER_MAX_TOKENS,
    DEFAULT_PARSER_TEMPERATURE,
)

_log = logging.getLogger("agrivoice")

BACKEND_KINDS = ("mlx", "litellm", "none")


# ---------------------------------------------------------------------------
# Nested config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BackendConfig:
    """Which inference backend to use and how to load it."""

    kind: str = DEFAULT_BACKEND_KIND
    candidates: tuple[str, ...] = DEFAULT_MODEL_CANDIDATES
    catalog: tuple[str, ...] = DEFAULT_MODEL_CATALOG
    load_timeout: float = DEFAULT_LOAD_TIMEOUT
    fallback_count: int = DEFAULT_FALLBACK_COUNT
    data_dir: str = DEFAULT_DATA_DIR
    cache_dir: str | None = None
    api_base: str | None = None
    local_files_only: bool = False


@dataclass(frozen=True, slots=True)
class ParserConfig:
    """Sampling settings for model-backed intent parsing."""

    temperature: float = DEFAULT_PARSER_TEMPERATURE
    max_tokens: int = DEFAULT_PARSER_MAX_TOKENS
    completion_timeout: float | None = None


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Arbitration settings."""

    threshold: float = DEFAULT_AI_THRESHOLD
    default_language: str = DEFAULT_LANGUAGE


@dataclass(frozen=True, slots=True)
class AgrivoiceConfig:
    """Top-level configuration loaded from ~/.config/agrivoice/config.json."""

    backend: BackendConfig = field(default_factory=BackendConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    router: RouterConfig = field(default_factory=RouterConfig)


# ---------------------------------------------------------------------------
# Config loading helpers
# ---------------------------------------------------------------------------


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config subsection, ignoring anything that is not an object."""
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        _log.debug("Ignoring malformed config section %r", name)
        return {}
    return raw


def _str_tuple(raw: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return default
    return tuple(str(item) for item in raw if item)


def _optional_float(raw: Any) -> float | None:
    return None if raw is None else float(raw)


def resolve_config_dir() -> Path:
    """Config directory, honouring ``AGRIVOICE_CONFIG_DIR``."""
    return Path(
        os.environ.get(DEFAULT_CONFIG_DIR_ENV, "") or DEFAULT_CONFIG_DIR,
    ).expanduser()


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(path: str | None = None) -> AgrivoiceConfig:
    """Load agrivoice configuration from a JSON file.

    Reads ``~/.config/agrivoice/config.json`` (or *path*). Supports the
    ``AGRIVOICE_CONFIG_DIR`` environment variable to override the config
    directory.

    Returns a default config if the file does not exist.
    """
    config_path = (
        Path(path).expanduser() if path else resolve_config_dir() / DEFAULT_CONFIG_FILE
    )
    if not config_path.exists():
        return AgrivoiceConfig()

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        return AgrivoiceConfig()

    # -- backend -----------------------------------------------------------
    backend_raw = _section(data, "backend")
    kind = str(backend_raw.get("kind", DEFAULT_BACKEND_KIND)).lower()
    if kind not in BACKEND_KINDS:
        _log.warning("Unknown backend kind %r; using %r", kind, DEFAULT_BACKEND_KIND)
        kind = DEFAULT_BACKEND_KIND
    backend = BackendConfig(
        kind=kind,
        candidates=_str_tuple(backend_raw.get("candidates"), DEFAULT_MODEL_CANDIDATES),
        catalog=_str_tuple(backend_raw.get("catalog"), DEFAULT_MODEL_CATALOG),
        load_timeout=float(backend_raw.get("load_timeout", DEFAULT_LOAD_TIMEOUT)),
        fallback_count=int(backend_raw.get("fallback_count", DEFAULT_FALLBACK_COUNT)),
        data_dir=str(backend_raw.get("data_dir", DEFAULT_DATA_DIR)),
        cache_dir=backend_raw.get("cache_dir"),
        api_base=backend_raw.get("api_base"),
        local_files_only=bool(backend_raw.get("local_files_only", False)),
    )

    # -- parser ------------------------------------------------------------
    parser_raw = _section(data, "parser")
    parser = ParserConfig(
        temperature=float(parser_raw.get("temperature", DEFAULT_PARSER_TEMPERATURE)),
        max_tokens=int(parser_raw.get("max_tokens", DEFAULT_PARSER_MAX_TOKENS)),
        completion_timeout=_optional_float(parser_raw.get("completion_timeout")),
    )

    # -- router ------------------------------------------------------------
    router_raw = _section(data, "router")
    router = RouterConfig(
        threshold=float(router_raw.get("threshold", DEFAULT_AI_THRESHOLD)),
        default_language=str(router_raw.get("default_language", DEFAULT_LANGUAGE)),
    )

    return AgrivoiceConfig(backend=backend, parser=parser, router=router)
