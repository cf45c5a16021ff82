"""Core data types shared across agrivoice modules."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Literal

Action = Literal["navigate", "chat", "weather", "popup", "tab"]
DecisionSource = Literal["keywords", "model"]
StatusMode = Literal["ai", "loading", "keywords", "error"]


@dataclass(frozen=True, slots=True)
class VoiceDecision:
    """Immutable routing decision for one transcript.

    Attributes:
        action: What the app should do with the utterance.
        target_id: Feature registry id, or None when there is no target.
        confidence: Internal ranking signal in [0, 1].
        sub_action: Optional sub-tab / sub-popup qualifier, not validated.
        reason: Diagnostic text, never parsed.
        language: Language the transcript was routed under.
        query_normalized: The normalized transcript.
        source: Which component produced the decision.
    """

    action: Action
    target_id: str | None
    confidence: float
    sub_action: str | None = None
    reason: str = ""
    language: str | None = None
    query_normalized: str | None = None
    source: DecisionSource = "keywords"

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence!r}")

    def to_dict(self) -> dict[str, Any]:
        """Wire form: camelCase keys, absent optionals omitted."""
        data: dict[str, Any] = {
            "action": self.action,
            "targetId": self.target_id,
            "confidence": self.confidence,
        }
        if self.sub_action is not None:
            data["subAction"] = self.sub_action
        if self.reason:
            data["reason"] = self.reason
        if self.language is not None:
            data["language"] = self.language
        if self.query_normalized is not None:
            data["queryNormalized"] = self.query_normalized
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One progress update; percentage is clamped to [0, 100]."""

    text: str
    percentage: float

    def __post_init__(self) -> None:
        clamped = min(100.0, max(0.0, float(self.percentage)))
        object.__setattr__(self, "percentage", clamped)


class BackendState(enum.Enum):
    """Lifecycle of the inference backend."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Point-in-time view of the backend, safe to poll."""

    ready: bool
    loading: bool
    error: str | None
    mode: StatusMode
    status_text: str
    model_id: str | None
    progress: float = 0.0
