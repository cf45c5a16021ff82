"""Model-backed intent parsing for transcribed voice commands.

Builds a prompt from the feature registry and a few fixed examples, asks
the ready engine for a JSON decision, and validates what comes back.
Anything that cannot be turned into a decision raises ParseError.
"""

import asyncio
import json
import math
import re
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from agrivoice.core.classifier import normalize_transcript
from agrivoice.core.constants import (
    DEFAULT_PARSER_CONFIDENCE,
    DEFAULT_PARSER_MAX_TOKENS,
    DEFAULT_PARSER_TEMPERATURE,
)
from agrivoice.core.errors import ParseError
from agrivoice.core.features import ACTIONS, describe_features, is_known_feature
from agrivoice.core.manager import InferenceBackendManager
from agrivoice.core.protocols import SamplingParams
from agrivoice.core.types import Action, VoiceDecision

ROUTER_SYSTEM_PROMPT: Final = (
    "You are the voice command router of a farming assistant app. "
    "Map what the farmer says to one app feature. Understand the need behind "
    "the words instead of matching keywords. Reply with a single JSON object "
    "and nothing else."
)

FEW_SHOT_EXAMPLES: Final = (
    (
        "My tomato leaves have brown spots, what should I do?",
        {"action": "navigate", "targetId": "diagnose", "confidence": 0.92,
         "reason": "symptoms on leaves point to disease diagnosis"},
    ),
    (
        "How much did I spend on fertilizer this month?",
        {"action": "navigate", "targetId": "expense", "confidence": 0.9,
         "reason": "asks about money spent"},
    ),
    (
        "Is it going to rain before I harvest?",
        {"action": "navigate", "targetId": "weather", "confidence": 0.85,
         "reason": "concern about upcoming rain"},
    ),
    (
        "Tell me something interesting about farming",
        {"action": "chat", "targetId": None, "confidence": 0.7,
         "reason": "open-ended conversation, no specific screen"},
    ),
)

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)


def build_prompt(transcript: str, language: str | None) -> str:
    """Assemble the routing prompt for one transcript."""
    examples = "\n".join(
        f'"{query}" -> {json.dumps(answer)}' for query, answer in FEW_SHOT_EXAMPLES
    )
    return (
        f"App features (targetId: meaning):\n{describe_features()}\n\n"
        f"Allowed actions: {', '.join(ACTIONS)}. Use \"navigate\" with a targetId "
        "for a clear destination and \"chat\" with targetId null for open-ended "
        "requests.\n\n"
        f"Examples:\n{examples}\n\n"
        "Output schema:\n"
        '{"action": string, "targetId": string or null, "subAction": string (optional), '
        '"confidence": number between 0 and 1, "reason": string}\n\n'
        f"User language: {language or 'unknown'}\n"
        f'User said: "{transcript}"'
    )


def build_messages(transcript: str, language: str | None) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": ROUTER_SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(transcript, language)},
    ]


def extract_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` span in *text*, or None.

    Braces inside JSON string literals are ignored. An opening brace that
    never closes is skipped in favour of the next one.
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            return text[start : end + 1]
        start = text.find("{", start + 1)
    return None


def _balanced_end(text: str, start: int) -> int | None:
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


class DecisionPayload(BaseModel):
    """Schema for the JSON object a model returns."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action: Action = "navigate"
    target_id: str | None = Field(default=None, alias="targetId")
    sub_action: str | None = Field(default=None, alias="subAction")
    confidence: float = DEFAULT_PARSER_CONFIDENCE
    reason: str = ""

    @field_validator("action", mode="before")
    @classmethod
    def _normalize_action(cls, value: Any) -> Any:
        if value is None:
            return "navigate"
        return str(value).strip().lower()

    @field_validator("target_id", mode="before")
    @classmethod
    def _known_target(cls, value: Any) -> str | None:
        return value if is_known_feature(value) else None

    @field_validator("sub_action", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> str | None:
        return None if value in (None, "") else str(value)

    @field_validator("reason", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        if value is None:
            return DEFAULT_PARSER_CONFIDENCE
        if isinstance(value, bool):
            raise ValueError("confidence must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError("confidence must be a number") from None
        if math.isnan(number):
            raise ValueError("confidence must be a number")
        return min(1.0, max(0.0, number))


def decode_decision(text: str, language: str | None, query: str) -> VoiceDecision:
    """Turn raw model output into a validated VoiceDecision."""
    # Strip reasoning tags some models emit.
    cleaned = _THINK_RE.sub("", text or "")
    fragment = extract_json_object(cleaned)
    if fragment is None:
        raise ParseError("model output contains no JSON object")

    try:
        raw = json.loads(fragment)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ParseError(f"model output is not valid JSON: {exc}") from exc

    try:
        payload = DecisionPayload.model_validate(raw)
    except ValidationError as exc:
        raise ParseError(
            f"model output failed validation ({exc.error_count()} errors)"
        ) from exc

    return VoiceDecision(
        action=payload.action,
        target_id=payload.target_id,
        confidence=payload.confidence,
        sub_action=payload.sub_action,
        reason=payload.reason,
        language=language,
        query_normalized=query,
        source="model",
    )


class IntentParser:
    """Asks the manager's ready engine to classify a transcript.

    No timeout applies to the completion unless *completion_timeout* is set.
    """

    def __init__(
        self,
        manager: InferenceBackendManager,
        *,
        temperature: float = DEFAULT_PARSER_TEMPERATURE,
        max_tokens: int = DEFAULT_PARSER_MAX_TOKENS,
        completion_timeout: float | None = None,
    ) -> None:
        self._manager = manager
        self._params = SamplingParams(temperature=temperature, max_tokens=max_tokens)
        self._completion_timeout = completion_timeout

    async def parse(self, transcript: str, language: str | None) -> VoiceDecision:
        engine = self._manager.engine
        if engine is None:
            raise ParseError("inference backend is not ready")

        messages = build_messages(transcript, language)
        call = asyncio.to_thread(engine.complete, messages, self._params)
        try:
            if self._completion_timeout is None:
                text = await call
            else:
                text = await asyncio.wait_for(call, timeout=self._completion_timeout)
        except asyncio.TimeoutError as exc:
            raise ParseError(
                f"completion exceeded {self._completion_timeout:g}s"
            ) from exc
        except Exception as exc:
            raise ParseError(f"completion failed: {exc}") from exc

        return decode_decision(text, language, normalize_transcript(transcript))
