"""Deterministic keyword classifier.

Pure table lookup with no external dependency: the fast path and the
safety net for every routing call.
"""

import re

from agrivoice.core.constants import (
    KEYWORD_MAX_CONFIDENCE,
    KEYWORD_SCORE_SCALE,
    NO_MATCH_CONFIDENCE,
)
from agrivoice.core.keywords import keywords_for
from agrivoice.core.types import VoiceDecision


def normalize_transcript(transcript: str) -> str:
    """Lowercase, trim and collapse runs of whitespace."""
    return re.sub(r"\s+", " ", transcript or "").strip().lower()


class KeywordClassifier:
    """Scores keyword hits by how much of the transcript they cover."""

    def classify(self, transcript: str, language: str | None) -> VoiceDecision:
        query = normalize_transcript(transcript)

        best_score = 0.0
        best_feature: str | None = None
        best_keyword = ""
        if query:
            for feature_id, keyword in keywords_for(language):
                if keyword not in query:
                    continue
                score = len(keyword) / len(query)
                # Strict improvement only: ties keep the higher-priority feature.
                if score > best_score:
                    best_score = score
                    best_feature = feature_id
                    best_keyword = keyword

        if best_feature is None:
            return VoiceDecision(
                action="navigate",
                target_id=None,
                confidence=NO_MATCH_CONFIDENCE,
                reason="no keyword matched",
                language=language,
                query_normalized=query,
                source="keywords",
            )

        return VoiceDecision(
            action="navigate",
            target_id=best_feature,
            confidence=min(KEYWORD_MAX_CONFIDENCE, best_score * KEYWORD_SCORE_SCALE),
            reason=f"keyword {best_keyword!r} matched {best_feature}",
            language=language,
            query_normalized=query,
            source="keywords",
        )


def classify(transcript: str, language: str | None) -> VoiceDecision:
    """Module-level convenience wrapper around KeywordClassifier."""
    return KeywordClassifier().classify(transcript, language)
