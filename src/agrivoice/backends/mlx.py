"""On-device backend: Hugging Face hub models run with mlx_lm on Apple Silicon.

All MLX imports are deferred inside functions so that importing this
module is safe on machines without MLX.
"""

import json
from collections.abc import Sequence
from typing import Any

from agrivoice.core.constants import DEFAULT_MODEL_CATALOG
from agrivoice.core.env import LOGGER, suppress_output
from agrivoice.core.errors import CorruptedArtifact
from agrivoice.core.protocols import LoadConfig, NativeProgress, SamplingParams

_ALLOW_PATTERNS = ["*.json", "*.safetensors", "*.model", "*.txt", "*.jinja"]
# Fraction of the load spent downloading; the rest is weight loading.
_DOWNLOAD_SHARE = 0.8


class MlxEngine:
    """A loaded mlx_lm model with its tokenizer."""

    __slots__ = ("model", "tokenizer", "model_id")

    def __init__(self, model: Any, tokenizer: Any, model_id: str) -> None:
        self.model = model
        self.tokenizer = tokenizer
        self.model_id = model_id

    def complete(
        self, messages: Sequence[dict[str, str]], params: SamplingParams
    ) -> str:
        from mlx_lm import generate
        from mlx_lm.sample_utils import make_sampler

        prompt = self.tokenizer.apply_chat_template(
            list(messages), tokenize=False, add_generation_prompt=True
        )
        with suppress_output():
            return generate(
                self.model,
                self.tokenizer,
                prompt,
                max_tokens=params.max_tokens,
                sampler=make_sampler(temp=params.temperature),
                verbose=False,
            )


def _forwarding_tqdm(on_progress: NativeProgress, model_id: str) -> type:
    """Build a tqdm class that reports download progress to *on_progress*.

    Counts are tracked locally because a disabled bar does not advance.
    """
    from huggingface_hub.utils import tqdm as hf_tqdm

    class ForwardingTqdm(hf_tqdm):
        def _report(self, n: float) -> None:
            self._forwarded = getattr(self, "_forwarded", 0) + n
            if self.total:
                fraction = min(1.0, self._forwarded / self.total)
                on_progress(
                    fraction * _DOWNLOAD_SHARE,
                    f"Downloading {model_id} ({fraction:.0%})",
                )

        def update(self, n: float | None = 1) -> bool | None:
            result = super().update(n)
            self._report(n or 0)
            return result

        def __iter__(self):
            for item in super().__iter__():
                self._report(1)
                yield item

    return ForwardingTqdm


def _is_corruption(exc: BaseException) -> bool:
    if isinstance(exc, (json.JSONDecodeError, UnicodeDecodeError)):
        return True
    return isinstance(exc, (ValueError, RuntimeError)) and "safetensors" in str(exc).lower()


class MlxBackend:
    """Catalog of small instruction models plus any already in the HF cache."""

    def __init__(
        self,
        catalog: Sequence[str] = DEFAULT_MODEL_CATALOG,
        *,
        include_cached: bool = True,
        cache_dir: str | None = None,
    ) -> None:
        self._catalog = tuple(catalog)
        self._include_cached = include_cached
        self._cache_dir = cache_dir

    def available_models(self) -> list[str]:
        models = list(self._catalog)
        if not self._include_cached:
            return models

        from huggingface_hub import scan_cache_dir
        from huggingface_hub.utils import CacheNotFound

        try:
            info = scan_cache_dir(self._cache_dir)
        except CacheNotFound:
            return models
        for repo in sorted(info.repos, key=lambda r: r.repo_id):
            if (
                repo.repo_type == "model"
                and repo.repo_id.startswith("mlx-community/")
                and repo.repo_id not in models
            ):
                models.append(repo.repo_id)
        return models

    def load(
        self, model_id: str, config: LoadConfig, on_progress: NativeProgress
    ) -> MlxEngine:
        from huggingface_hub import snapshot_download
        from mlx_lm import load

        local_path = snapshot_download(
            model_id,
            cache_dir=config.cache_dir or self._cache_dir,
            local_files_only=config.local_files_only,
            allow_patterns=_ALLOW_PATTERNS,
            tqdm_class=_forwarding_tqdm(on_progress, model_id),
        )

        on_progress(_DOWNLOAD_SHARE, f"Loading {model_id} weights...")
        try:
            with suppress_output():
                model, tokenizer = load(local_path)
        except Exception as exc:
            if _is_corruption(exc):
                raise CorruptedArtifact(model_id, str(exc)) from exc
            raise

        LOGGER.debug("Loaded %s from %s", model_id, local_path)
        on_progress(1.0, f"{model_id} loaded")
        return MlxEngine(model, tokenizer, model_id)
