"""Process environment and logging for agrivoice.

Call setup_environment() before a model backend is imported; the hub,
tokenizer and litellm libraries read these variables at import time.
"""

import contextlib
import logging
import os
import warnings
from collections.abc import Iterator

LOGGER = logging.getLogger("agrivoice")

_LIBRARY_ENV = {
    # Our own progress display replaces the hub's tqdm bars.
    "HF_HUB_DISABLE_PROGRESS_BARS": "1",
    "TOKENIZERS_PARALLELISM": "false",
    "TRANSFORMERS_VERBOSITY": "error",
    "LITELLM_LOG": "ERROR",
}


def setup_environment() -> None:
    """Quiet third-party libraries; values already set by the user win."""
    for key, value in _LIBRARY_ENV.items():
        os.environ.setdefault(key, value)
    warnings.filterwarnings("ignore", category=FutureWarning)
    warnings.filterwarnings("ignore", category=DeprecationWarning)


@contextlib.contextmanager
def suppress_output() -> Iterator[None]:
    """Send native (fd 2) stderr chatter from MLX/Metal to devnull.

    Python-level streams stay untouched so a live progress display keeps
    rendering while a model loads.
    """
    with open(os.devnull, "w") as devnull:
        saved = os.dup(2)
        try:
            os.dup2(devnull.fileno(), 2)
            yield
        finally:
            os.dup2(saved, 2)
            os.close(saved)
