"""Default configuration values for agrivoice."""

from typing import Final

# Offline model candidates, most preferred first.
DEFAULT_MODEL_CANDIDATES: Final = (
    "mlx-community/Qwen2.5-0.5B-Instruct-4bit",
    "mlx-community/Llama-3.2-1B-Instruct-4bit",
    "mlx-community/gemma-2-2b-it-4bit",
    "mlx-community/Qwen3-0.6B-4bit",
)
# Small instruction models known to load on-device via mlx_lm.
DEFAULT_MODEL_CATALOG: Final = (
    "mlx-community/Qwen2.5-0.5B-Instruct-4bit",
    "mlx-community/Qwen2.5-1.5B-Instruct-4bit",
    "mlx-community/Llama-3.2-1B-Instruct-4bit",
    "mlx-community/Qwen3-0.6B-4bit",
    "mlx-community/gemma-2-2b-it-4bit",
    "mlx-community/Phi-3.5-mini-instruct-4bit",
)
DEFAULT_BACKEND_KIND: Final = "mlx"
DEFAULT_LOAD_TIMEOUT: Final = 120.0
DEFAULT_FALLBACK_COUNT: Final = 3
DEFAULT_DATA_DIR: Final = "~/.local/share/agrivoice"
DEFAULT_STATE_FILE: Final = "state.json"

# Cached artifacts whose names contain one of these belong to us.
CACHE_NAMESPACE_PREFIXES: Final = (
    "mlx-community/",
    "agrivoice:model:",
    "agrivoice:engine:",
)
MODEL_RECORD_PREFIX: Final = "agrivoice:model:"

# Progress band reserved for the model download/load.
PROGRESS_LOAD_START: Final = 10.0
PROGRESS_LOAD_END: Final = 95.0

# Keyword classifier
KEYWORD_MAX_CONFIDENCE: Final = 0.8
KEYWORD_SCORE_SCALE: Final = 2.0
NO_MATCH_CONFIDENCE: Final = 0.1

# Intent parser
DEFAULT_PARSER_TEMPERATURE: Final = 0.1
DEFAULT_PARSER_MAX_TOKENS: Final = 256
DEFAULT_PARSER_CONFIDENCE: Final = 0.5

# Arbiter
DEFAULT_AI_THRESHOLD: Final = 0.6
DEFAULT_LANGUAGE: Final = "english"

# Config file
DEFAULT_CONFIG_DIR: Final = "~/.config/agrivoice"
DEFAULT_CONFIG_DIR_ENV: Final = "AGRIVOICE_CONFIG_DIR"
DEFAULT_CONFIG_FILE: Final = "config.json"
