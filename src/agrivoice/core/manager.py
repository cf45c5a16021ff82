"""Lifecycle of the optional on-device inference backend.

InferenceBackendManager owns the only mutable backend state: which engine
is loaded, whether a load is in flight, and why the last one failed.
States move Uninitialized -> Loading -> Ready | Failed; clear_cache()
returns to Uninitialized from anywhere.

Blocking backend calls run in worker threads; progress reported from
those threads is marshalled back onto the event loop.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Callable, Iterable, Sequence

from agrivoice.core.constants import (
    CACHE_NAMESPACE_PREFIXES,
    DEFAULT_FALLBACK_COUNT,
    DEFAULT_LOAD_TIMEOUT,
    DEFAULT_MODEL_CANDIDATES,
    MODEL_RECORD_PREFIX,
    PROGRESS_LOAD_END,
    PROGRESS_LOAD_START,
)
from agrivoice.core.env import LOGGER
from agrivoice.core.errors import (
    AllCandidatesFailed,
    BackendUnavailable,
    CacheClearFailure,
    CorruptedArtifact,
    LoadTimeout,
)
from agrivoice.core.progress import ProgressBus, ProgressCallback
from agrivoice.core.protocols import (
    BlobCache,
    InferenceBackend,
    InferenceEngine,
    KeyValueStore,
    LoadConfig,
    NativeProgress,
)
from agrivoice.core.types import BackendState, ProgressEvent, StatusSnapshot


class InferenceBackendManager:
    """Loads one engine from an ordered list of candidate models.

    Args:
        backend: Capability provider, or None when no inference module
            is installed (every initialize() then fails fast).
        candidates: Preferred model ids, most preferred first.
        load_timeout: Seconds allowed for each candidate's load.
        fallback_count: Catalog entries to try when no candidate is listed.
        load_config: Passed through to ``backend.load``.
        blob_cache: Named-blob store holding downloaded artifacts.
        kv_store: Key-value store holding model bookkeeping.
        cache_prefixes: Name substrings identifying our cached artifacts.
    """

    def __init__(
        self,
        backend: InferenceBackend | None,
        *,
        candidates: Sequence[str] = DEFAULT_MODEL_CANDIDATES,
        load_timeout: float = DEFAULT_LOAD_TIMEOUT,
        fallback_count: int = DEFAULT_FALLBACK_COUNT,
        load_config: LoadConfig | None = None,
        blob_cache: BlobCache | None = None,
        kv_store: KeyValueStore | None = None,
        cache_prefixes: Sequence[str] = CACHE_NAMESPACE_PREFIXES,
    ) -> None:
        self._backend = backend
        self._candidates = tuple(candidates)
        self._load_timeout = load_timeout
        self._fallback_count = fallback_count
        self._load_config = load_config or LoadConfig()
        self._blob_cache = blob_cache
        self._kv_store = kv_store
        self._cache_prefixes = tuple(cache_prefixes)

        self._state = BackendState.UNINITIALIZED
        self._engine: InferenceEngine | None = None
        self._active_model_id: str | None = None
        self._error: str | None = None
        self._load_task: asyncio.Task[bool] | None = None
        # Load orphaned by clear_cache(); its worker thread may still be running.
        self._draining: asyncio.Task[bool] | None = None
        self._failure: Exception | None = None
        # Bumped by clear_cache() so an in-flight load cannot resurrect state.
        self._generation = 0
        # Bumped per candidate so a timed-out load's progress is dropped.
        self._attempt = 0
        self._percentage = 0.0

        self.progress = ProgressBus()
        self.last_errors: dict[str, BaseException] = {}

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def state(self) -> BackendState:
        return self._state

    @property
    def engine(self) -> InferenceEngine | None:
        return self._engine if self._state is BackendState.READY else None

    @property
    def active_model_id(self) -> str | None:
        return self._active_model_id

    @property
    def corrupted_artifact(self) -> bool:
        """True if the last failed load hit an undecodable cached artifact."""
        return any(isinstance(e, CorruptedArtifact) for e in self.last_errors.values())

    @property
    def last_error_kind(self) -> str | None:
        """Error class name behind the current failure, or None."""
        if self._state is not BackendState.FAILED or self._failure is None:
            return None
        if self.corrupted_artifact:
            return CorruptedArtifact.__name__
        return type(self._failure).__name__

    def is_ready(self) -> bool:
        return self._state is BackendState.READY

    def status(self) -> StatusSnapshot:
        state = self._state
        last = self.progress.last
        if state is BackendState.READY:
            mode, text = "ai", f"AI ready ({self._active_model_id})"
        elif state is BackendState.LOADING:
            mode, text = "loading", last.text if last else "Loading AI model..."
        elif state is BackendState.FAILED:
            mode, text = "error", "AI unavailable - using keywords"
        else:
            mode, text = "keywords", "Keyword mode"
        return StatusSnapshot(
            ready=state is BackendState.READY,
            loading=state is BackendState.LOADING,
            error=self._error,
            mode=mode,
            status_text=text,
            model_id=self._active_model_id,
            progress=last.percentage if last else 0.0,
        )

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        return self.progress.subscribe(callback)

    def progress_events(self) -> AsyncIterator[ProgressEvent]:
        """Async iterator over the next/current load session's events."""
        return self.progress.events()

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def initialize(self, on_progress: ProgressCallback | None = None) -> bool:
        """Load an engine, or join the load already in flight.

        Returns True when an engine is ready, False when keyword-only mode
        will be used. Never raises for load failures.
        """
        if self._state is BackendState.READY:
            return True

        unsubscribe = self.progress.subscribe(on_progress) if on_progress else None
        try:
            if self._load_task is None or self._load_task.done():
                self._state = BackendState.LOADING
                self._error = None
                self.last_errors = {}
                self._failure = None
                self.progress.reset()
                self._load_task = asyncio.create_task(
                    self._load(self._generation, self._draining)
                )
            # A caller giving up must not cancel the shared load.
            return await asyncio.shield(self._load_task)
        finally:
            if unsubscribe is not None:
                unsubscribe()

    async def _load(
        self, generation: int, previous: asyncio.Task[bool] | None = None
    ) -> bool:
        loop = asyncio.get_running_loop()
        self._percentage = 0.0
        self._emit("Preparing offline model...", 0.0)
        if previous is not None and not previous.done():
            # Never run two physical loads at once.
            await asyncio.wait([previous])
        if generation != self._generation:
            return False

        if self._backend is None:
            return self._fail(generation, BackendUnavailable("no inference backend installed"))
        try:
            candidates = await asyncio.to_thread(self._select_candidates)
        except Exception as exc:
            return self._fail(generation, BackendUnavailable(f"model catalog unavailable: {exc}"))

        errors: dict[str, BaseException] = {}
        for index, model_id in enumerate(candidates):
            if generation != self._generation:
                return False
            self._attempt += 1
            self._percentage = PROGRESS_LOAD_START
            self._emit(f"Downloading {model_id}...", PROGRESS_LOAD_START)
            hook = self._progress_hook(loop, self._attempt)
            try:
                engine = await asyncio.wait_for(
                    asyncio.to_thread(
                        self._backend.load, model_id, self._load_config, hook
                    ),
                    timeout=self._load_timeout,
                )
            except asyncio.TimeoutError:
                errors[model_id] = LoadTimeout(model_id, self._load_timeout)
            except Exception as exc:
                errors[model_id] = exc
            else:
                return self._succeed(generation, model_id, engine)

            LOGGER.warning("Model %s failed to load: %s", model_id, errors[model_id])
            if generation != self._generation:
                return False
            if index < len(candidates) - 1:
                self._emit("Trying fallback model...", self._percentage)

        return self._fail(generation, AllCandidatesFailed(errors), errors)

    def _select_candidates(self) -> list[str]:
        catalog = list(self._backend.available_models())
        selected = [m for m in self._candidates if m in catalog]
        if not selected:
            selected = catalog[: self._fallback_count]
            LOGGER.info(
                "No preferred model in catalog; falling back to %s", selected
            )
        return selected

    def _progress_hook(self, loop: asyncio.AbstractEventLoop, attempt: int) -> NativeProgress:
        span = PROGRESS_LOAD_END - PROGRESS_LOAD_START

        def hook(fraction: float, text: str) -> None:
            fraction = min(1.0, max(0.0, float(fraction)))
            percentage = PROGRESS_LOAD_START + fraction * span
            if not loop.is_closed():
                loop.call_soon_threadsafe(self._forward, attempt, text, percentage)

        return hook

    def _forward(self, attempt: int, text: str, percentage: float) -> None:
        if attempt != self._attempt or self._state is not BackendState.LOADING:
            return
        self._percentage = max(self._percentage, percentage)
        self._emit(text, self._percentage)

    def _emit(self, text: str, percentage: float, *, terminal: bool = False) -> None:
        self.progress.publish(ProgressEvent(text, percentage), terminal=terminal)

    def _succeed(self, generation: int, model_id: str, engine: InferenceEngine) -> bool:
        if generation != self._generation:
            LOGGER.info("Discarding %s: cache was cleared during load", model_id)
            return False
        self._state = BackendState.READY
        self._engine = engine
        self._active_model_id = model_id
        self._error = None
        self._record_model(model_id)
        LOGGER.info("Offline model ready: %s", model_id)
        self._emit("Model ready", 100.0, terminal=True)
        return True

    def _fail(
        self,
        generation: int,
        error: Exception,
        errors: dict[str, BaseException] | None = None,
    ) -> bool:
        if generation != self._generation:
            return False
        self._state = BackendState.FAILED
        self._engine = None
        self._active_model_id = None
        self._error = str(error)
        self._failure = error
        self.last_errors = dict(errors or {})
        LOGGER.warning("Offline model unavailable, using keyword mode: %s", error)
        self._emit("AI unavailable - using keyword mode", self._percentage, terminal=True)
        return False

    def _record_model(self, model_id: str) -> None:
        if self._kv_store is None:
            return
        try:
            self._kv_store.set(
                f"{MODEL_RECORD_PREFIX}{model_id}", {"loaded_at": time.time()}
            )
        except Exception as exc:
            LOGGER.warning("Could not record loaded model %s: %s", model_id, exc)

    # ------------------------------------------------------------------
    # Cache reset
    # ------------------------------------------------------------------

    async def clear_cache(self) -> None:
        """Delete our cached artifacts, then reset to Uninitialized.

        Deletion is best-effort: failures are logged and the reset
        happens regardless. Never raises.
        """
        failures = await asyncio.to_thread(self._delete_artifacts)
        for failure in failures:
            LOGGER.warning("Cache clear incomplete: %s", failure)

        if self._state is BackendState.LOADING:
            # Ends the open session for progress_events() consumers.
            self._emit("Model cache cleared", 0.0, terminal=True)
        if self._load_task is not None and not self._load_task.done():
            self._draining = self._load_task

        self._generation += 1
        self._attempt += 1
        self._state = BackendState.UNINITIALIZED
        self._engine = None
        self._active_model_id = None
        self._error = None
        self._load_task = None
        self._failure = None
        self._percentage = 0.0
        self.last_errors = {}
        self.progress.reset()
        LOGGER.info("Model cache cleared")

    def _delete_artifacts(self) -> list[CacheClearFailure]:
        failures: list[CacheClearFailure] = []
        if self._blob_cache is not None:
            failures += _purge(
                self._blob_cache.names, self._blob_cache.delete, self._cache_prefixes
            )
        if self._kv_store is not None:
            failures += _purge(
                self._kv_store.keys, self._kv_store.delete, self._cache_prefixes
            )
        return failures


def _purge(
    list_names: Callable[[], Iterable[str]],
    delete: Callable[[str], None],
    prefixes: tuple[str, ...],
) -> list[CacheClearFailure]:
    """Delete every name containing one of *prefixes*."""
    try:
        names = [n for n in list_names() if any(p in n for p in prefixes)]
    except Exception as exc:
        return [CacheClearFailure("<listing>", exc)]

    failures: list[CacheClearFailure] = []
    for name in names:
        try:
            delete(name)
        except Exception as exc:
            failures.append(CacheClearFailure(name, exc))
        else:
            LOGGER.debug("Deleted cached artifact %s", name)
    return failures


async def initialize_with_recovery(
    manager: InferenceBackendManager,
    on_progress: ProgressCallback | None = None,
    *,
    retry_delay: float = 2.0,
) -> bool:
    """Initialize, clearing the cache and retrying once on corruption."""
    if await manager.initialize(on_progress):
        return True
    if not manager.corrupted_artifact:
        return False

    LOGGER.info("Corrupted cached model detected; clearing cache and retrying")
    await manager.clear_cache()
    if retry_delay > 0:
        await asyncio.sleep(retry_delay)
    return await manager.initialize(on_progress)
