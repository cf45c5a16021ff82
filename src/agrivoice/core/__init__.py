"""Core routing engine — no backend or UI dependencies.

Re-exports key symbols for convenience.
"""

from agrivoice.core.classifier import KeywordClassifier, classify, normalize_transcript
from agrivoice.core.errors import (
    AgrivoiceError,
    AllCandidatesFailed,
    BackendUnavailable,
    CacheClearFailure,
    CorruptedArtifact,
    LoadTimeout,
    ParseError,
)
from agrivoice.core.features import FEATURE_IDS
from agrivoice.core.manager import InferenceBackendManager, initialize_with_recovery
from agrivoice.core.parser import IntentParser
from agrivoice.core.router import VoiceRouter
from agrivoice.core.types import (
    BackendState,
    ProgressEvent,
    StatusSnapshot,
    VoiceDecision,
)

__all__ = [
    "FEATURE_IDS",
    "AgrivoiceError",
    "AllCandidatesFailed",
    "BackendState",
    "BackendUnavailable",
    "CacheClearFailure",
    "CorruptedArtifact",
    "InferenceBackendManager",
    "IntentParser",
    "KeywordClassifier",
    "LoadTimeout",
    "ParseError",
    "ProgressEvent",
    "StatusSnapshot",
    "VoiceDecision",
    "VoiceRouter",
    "classify",
    "initialize_with_recovery",
    "normalize_transcript",
]
