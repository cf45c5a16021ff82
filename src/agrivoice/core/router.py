"""Arbitration between keyword matching and model-backed parsing.

VoiceRouter is the owned context for one application: it holds the single
backend manager, the keyword classifier and the intent parser, and exposes
the routing entry point. route() never raises.
"""

from agrivoice.core.classifier import KeywordClassifier
from agrivoice.core.constants import DEFAULT_AI_THRESHOLD
from agrivoice.core.env import LOGGER
from agrivoice.core.manager import InferenceBackendManager, initialize_with_recovery
from agrivoice.core.parser import IntentParser
from agrivoice.core.progress import ProgressCallback
from agrivoice.core.types import StatusSnapshot, VoiceDecision


class VoiceRouter:
    """Routes transcripts to app features, keywords first.

    The model is consulted only when it is ready and the keyword match is
    weaker than *threshold*; its answer wins only with strictly higher
    confidence.
    """

    def __init__(
        self,
        manager: InferenceBackendManager,
        *,
        classifier: KeywordClassifier | None = None,
        parser: IntentParser | None = None,
        threshold: float = DEFAULT_AI_THRESHOLD,
    ) -> None:
        self.manager = manager
        self.classifier = classifier or KeywordClassifier()
        self.parser = parser or IntentParser(manager)
        self.threshold = threshold

    async def route(self, transcript: str, language: str | None) -> VoiceDecision:
        keyword = self.classifier.classify(transcript, language)
        LOGGER.debug("Keyword decision: %s", keyword)

        if not self.manager.is_ready() or keyword.confidence >= self.threshold:
            return keyword

        try:
            parsed = await self.parser.parse(transcript, language)
        except Exception as exc:
            LOGGER.warning("Intent parsing failed, using keywords: %s", exc)
            return keyword

        if parsed.action == "navigate" and parsed.target_id is None:
            LOGGER.debug("Model chose navigate without a target; using keywords")
            return keyword
        if parsed.confidence > keyword.confidence:
            LOGGER.debug("Model decision: %s", parsed)
            return parsed
        return keyword

    async def initialize(
        self, on_progress: ProgressCallback | None = None, *, recover: bool = False
    ) -> bool:
        """Begin or await backend readiness.

        With *recover*, a corrupted cached model triggers one cache clear
        and retry.
        """
        if recover:
            return await initialize_with_recovery(self.manager, on_progress)
        return await self.manager.initialize(on_progress)

    def status(self) -> StatusSnapshot:
        return self.manager.status()

    def is_ready(self) -> bool:
        return self.manager.is_ready()

    async def clear_cache(self) -> None:
        await self.manager.clear_cache()
