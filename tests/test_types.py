"""Tests for agrivoice.core.types — decisions, progress events, snapshots."""

from __future__ import annotations

import json

import pytest

from agrivoice.core.types import ProgressEvent, VoiceDecision


class TestVoiceDecision:
    def test_defaults(self) -> None:
        decision = VoiceDecision(action="navigate", target_id="home", confidence=0.5)
        assert decision.sub_action is None
        assert decision.reason == ""
        assert decision.source == "keywords"

    @pytest.mark.parametrize("confidence", [-0.01, 1.01, float("nan")])
    def test_confidence_bounds_enforced(self, confidence: float) -> None:
        with pytest.raises(ValueError):
            VoiceDecision(action="navigate", target_id=None, confidence=confidence)

    def test_frozen(self) -> None:
        decision = VoiceDecision(action="chat", target_id=None, confidence=0.3)
        with pytest.raises(AttributeError):
            decision.confidence = 0.9

    def test_wire_form_omits_absent_fields(self) -> None:
        decision = VoiceDecision(action="navigate", target_id=None, confidence=0.1)
        assert decision.to_dict() == {
            "action": "navigate",
            "targetId": None,
            "confidence": 0.1,
        }

    def test_wire_form_uses_camel_case(self) -> None:
        decision = VoiceDecision(
            action="tab",
            target_id="twin",
            confidence=0.7,
            sub_action="soil",
            reason="r",
            language="malayalam",
            query_normalized="ട്വിൻ",
        )
        data = json.loads(decision.to_json())
        assert data["targetId"] == "twin"
        assert data["subAction"] == "soil"
        assert data["queryNormalized"] == "ട്വിൻ"
        assert "ട്വിൻ" in decision.to_json()


class TestProgressEvent:
    @pytest.mark.parametrize(
        ("raw", "expected"), [(-5, 0.0), (42.5, 42.5), (250, 100.0)]
    )
    def test_percentage_clamped(self, raw: float, expected: float) -> None:
        assert ProgressEvent("x", raw).percentage == expected
