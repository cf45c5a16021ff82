__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy re-exports from agrivoice.api for convenience."""
    _api_names = {
        "VoiceRouter",
        "build_router",
        "clear_model_cache",
        "configure",
        "get_offline_llm_status",
        "get_router",
        "init_offline_llm",
        "is_offline_llm_ready",
        "route_from_transcript",
    }
    if name in _api_names:
        from agrivoice import api

        return getattr(api, name)
    raise AttributeError(f"module 'agrivoice' has no attribute {name!r}")
