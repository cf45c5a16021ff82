"""Tests for agrivoice.core.classifier — offline keyword matching."""

from __future__ import annotations

import pytest

from agrivoice.core.classifier import KeywordClassifier, classify, normalize_transcript
from agrivoice.core.features import FEATURE_IDS
from agrivoice.core.keywords import KEYWORD_TABLES, keywords_for, normalize_language


class TestScenarios:
    def test_spend_routes_to_expense(self) -> None:
        decision = classify("How much did I spend on fertilizer last month?", "english")
        assert decision.action == "navigate"
        assert decision.target_id == "expense"
        assert decision.confidence > 0.1
        assert "spend" in decision.reason

    def test_forecast_routes_to_weather(self) -> None:
        decision = classify("What's the forecast for tomorrow?", "english")
        assert decision.target_id == "weather"
        assert decision.action == "navigate"

    def test_no_match_falls_back_to_low_confidence(self) -> None:
        decision = classify("hmm, the tomatoes look strange", "english")
        assert decision.target_id is None
        assert decision.confidence == 0.1
        assert decision.action == "navigate"
        assert decision.reason == "no keyword matched"

    @pytest.mark.parametrize("transcript", ["", "   ", "\n\t"])
    def test_blank_transcript_is_no_match(self, transcript: str) -> None:
        decision = classify(transcript, "english")
        assert decision.target_id is None
        assert decision.confidence == 0.1
        assert decision.query_normalized == ""


class TestScoring:
    def test_confidence_capped(self) -> None:
        decision = classify("Weather", "english")
        assert decision.target_id == "weather"
        assert decision.confidence == 0.8

    def test_confidence_is_twice_coverage(self) -> None:
        # "spend" covers 5 of 20 characters.
        decision = classify("i want to spend less", "english")
        assert decision.target_id == "expense"
        assert decision.confidence == pytest.approx(0.5)

    def test_longest_keyword_wins(self) -> None:
        decision = classify("home remedies for pests", "english")
        assert decision.target_id == "knowledge"

    def test_ties_keep_registry_priority(self) -> None:
        # "plan" (planner) and "chat" (chatbot) are the same length.
        assert classify("chat plan", "english").target_id == "planner"
        assert classify("plan chat", "english").target_id == "planner"

    def test_deterministic(self) -> None:
        classifier = KeywordClassifier()
        first = classifier.classify("Open the farmer forum please", "english")
        second = classifier.classify("Open the farmer forum please", "english")
        assert first == second


class TestLanguages:
    def test_hindi_table(self) -> None:
        decision = classify("आज मौसम कैसा है", "hindi")
        assert decision.target_id == "weather"

    def test_malayalam_table(self) -> None:
        decision = classify("ഇന്നത്തെ കാലാവസ്ഥ", "malayalam")
        assert decision.target_id == "weather"

    def test_english_words_match_in_other_languages(self) -> None:
        decision = classify("mujhe news dikhao", "hindi")
        assert decision.target_id == "news"

    def test_language_is_case_insensitive(self) -> None:
        assert classify("मौसम", "Hindi").target_id == "weather"

    @pytest.mark.parametrize("language", [None, "", "klingon"])
    def test_unknown_language_uses_english(self, language: str | None) -> None:
        assert normalize_language(language) == "english"
        assert classify("weather please", language).target_id == "weather"

    def test_language_echoed(self) -> None:
        assert classify("news", "malayalam").language == "malayalam"


class TestTables:
    def test_tables_only_use_registry_ids(self) -> None:
        for table in KEYWORD_TABLES.values():
            assert set(table) <= set(FEATURE_IDS)

    def test_tables_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            KEYWORD_TABLES["english"]["home"] = ("x",)  # type: ignore[index]

    def test_pairs_follow_registry_order(self) -> None:
        order = [fid for fid, _ in keywords_for("english")]
        indices = [FEATURE_IDS.index(fid) for fid in order]
        assert indices == sorted(indices)


class TestNormalize:
    def test_collapses_whitespace_and_lowercases(self) -> None:
        assert normalize_transcript("  Show   ME\tthe News ") == "show me the news"
