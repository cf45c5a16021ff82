"""Error kinds raised inside the routing engine.

Only ParseError ever leaves a component boundary (the intent parser);
everything else is absorbed by the backend manager and reported through
its status snapshot.
"""


class AgrivoiceError(Exception):
    """Base class for all agrivoice errors."""


class BackendUnavailable(AgrivoiceError):
    """No usable inference module is present at all."""


class LoadTimeout(AgrivoiceError):
    """A single candidate model exceeded its load budget."""

    def __init__(self, model_id: str, timeout: float) -> None:
        super().__init__(f"loading {model_id} timed out after {timeout:g}s")
        self.model_id = model_id
        self.timeout = timeout


class CorruptedArtifact(AgrivoiceError):
    """A cached model artifact could not be decoded while loading."""

    def __init__(self, model_id: str, detail: str) -> None:
        super().__init__(f"corrupted cached artifact for {model_id}: {detail}")
        self.model_id = model_id


class AllCandidatesFailed(AgrivoiceError):
    """Every preferred and fallback model failed to load."""

    def __init__(self, errors: dict[str, BaseException]) -> None:
        tried = ", ".join(errors) or "none"
        super().__init__(f"all candidate models failed to load (tried: {tried})")
        self.errors = errors


class ParseError(AgrivoiceError):
    """Model output could not be turned into a decision."""


class CacheClearFailure(AgrivoiceError):
    """A cached artifact could not be removed."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(f"could not delete {name}: {cause}")
        self.name = name
        self.cause = cause
