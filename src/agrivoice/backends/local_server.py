"""Backend for a model served locally (Ollama, llama.cpp server, ...).

Uses litellm for provider-agnostic access. The litellm import is deferred
to avoid import-time overhead when this backend is not in use.
"""

from collections.abc import Sequence

from agrivoice.core.protocols import LoadConfig, NativeProgress, SamplingParams


class LitellmEngine:
    """Chat completion against one litellm model id."""

    __slots__ = ("model_id", "api_base")

    def __init__(self, model_id: str, api_base: str | None = None) -> None:
        self.model_id = model_id
        self.api_base = api_base

    def complete(
        self, messages: Sequence[dict[str, str]], params: SamplingParams
    ) -> str:
        from litellm import completion  # deferred import

        response = completion(
            model=self.model_id,
            messages=list(messages),
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            api_base=self.api_base,
        )
        return response.choices[0].message.content or ""


class LitellmBackend:
    """Serves a fixed catalog; "loading" is a warm-up round trip."""

    def __init__(self, models: Sequence[str], *, api_base: str | None = None) -> None:
        self._models = tuple(models)
        self._api_base = api_base

    def available_models(self) -> list[str]:
        return list(self._models)

    def load(
        self, model_id: str, config: LoadConfig, on_progress: NativeProgress
    ) -> LitellmEngine:
        engine = LitellmEngine(model_id, self._api_base)
        on_progress(0.5, f"Warming up {model_id}...")
        # Forces the server to pull the model into memory.
        engine.complete(
            [{"role": "user", "content": "ping"}],
            SamplingParams(temperature=0.0, max_tokens=1),
        )
        on_progress(1.0, f"{model_id} ready")
        return engine
