"""Structural type protocols for inference backends and artifact stores."""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

# Native load progress: fraction in [0, 1] plus a short description.
NativeProgress = Callable[[float, str], None]


@dataclass(frozen=True, slots=True)
class LoadConfig:
    """Options passed to a backend when loading a model."""

    cache_dir: str | None = None
    local_files_only: bool = False


@dataclass(frozen=True, slots=True)
class SamplingParams:
    """Sampling options for one chat completion."""

    temperature: float
    max_tokens: int


class InferenceEngine(Protocol):
    """A loaded model ready for chat-style completion."""

    model_id: str

    def complete(
        self, messages: Sequence[dict[str, str]], params: SamplingParams
    ) -> str: ...


class InferenceBackend(Protocol):
    """Capability to list, load and run local generative models.

    Both methods are blocking; the manager runs them in a worker thread.
    """

    def available_models(self) -> Sequence[str]: ...

    def load(
        self, model_id: str, config: LoadConfig, on_progress: NativeProgress
    ) -> InferenceEngine: ...


class BlobCache(Protocol):
    """Named-blob cache supporting enumerate/delete by name."""

    def names(self) -> Iterable[str]: ...

    def delete(self, name: str) -> None: ...


class KeyValueStore(Protocol):
    """Key-value store supporting enumerate-keys/delete."""

    def keys(self) -> Iterable[str]: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...
