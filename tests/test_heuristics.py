"""Tests for keyword task classification and complexity analysis."""

import pytest

from steward_router.heuristics import analyze_complexity, classify_task, is_privacy_sensitive


def test_multi_keyword_boost():
    c = classify_task("Please help me debug and fix this broken code")
    assert c.type == "debug"
    assert c.confidence >= 0.9
    assert "debug" in c.keywords
    assert "fix" in c.keywords


def test_single_keyword_uses_base_confidence():
    c = classify_task("Can you summarize this document for me?")
    assert c.type == "summarize"
    assert c.confidence == pytest.approx(0.9)
    assert c.keywords == ("summarize",)


def test_research_task():
    assert classify_task("I need to research the latest trends in AI").type == "research"


def test_sensitive_task():
    c = classify_task("This is private and confidential")
    assert c.type == "sensitive"
    assert c.confidence == 1.0


def test_empty_and_non_string_input():
    for bad in ("", None, 42, ["debug"]):
        c = classify_task(bad)
        assert c.type == "unknown"
        assert c.confidence == 0.0
        assert c.keywords == ()


def test_no_keyword_match_is_general():
    c = classify_task("Hello there")
    assert c.type == "general"
    assert c.confidence == 0.0


def test_tie_goes_to_first_declared_pattern():
    # "fix" (debug) and "summary" (summarize) both score 0.9
    assert classify_task("fix the summary").type == "debug"


def test_confidence_is_bounded():
    texts = [
        "debug fix error bug broken",
        "write compose create draft code function script program",
        "private confidential personal secret",
        "help",
        "explain what is this and how does it work",
    ]
    for text in texts:
        c = classify_task(text)
        assert 0.0 <= c.confidence <= 1.0


def test_privacy_pattern_is_word_bounded():
    assert is_privacy_sensitive("keep this PRIVATE please")
    assert not is_privacy_sensitive("privateer ships")
    assert not is_privacy_sensitive(None)


def test_complex_task_type():
    p = analyze_complexity("complex_reasoning", "")
    assert p.level == "high"
    assert p.requires_advanced_reasoning
    assert p.confidence == pytest.approx(0.8)


def test_batch_task_type():
    p = analyze_complexity("batch")
    assert p.level == "medium"
    assert p.requires_specialization
    assert p.is_batch_processing


def test_routine_with_quick_keyword():
    p = analyze_complexity("route", "quick route please")
    assert p.level == "low"
    assert p.is_routine
    assert p.confidence == pytest.approx(0.8)


def test_complex_keyword_upgrades_medium():
    p = analyze_complexity("debug", "give me a detailed analysis")
    assert p.level == "high"
    assert p.requires_advanced_reasoning
    assert p.confidence == pytest.approx(0.7)


def test_specialized_keyword():
    p = analyze_complexity("write", "convert these audio files")
    assert p.level == "medium"
    assert p.requires_specialization
    assert p.confidence == pytest.approx(0.6)


def test_level_never_lowered():
    assert analyze_complexity("complex_reasoning", "quick and simple").level == "high"


def test_default_profile():
    p = analyze_complexity("write", None)
    assert p.level == "medium"
    assert p.confidence == pytest.approx(0.5)
    assert not (p.requires_advanced_reasoning or p.requires_specialization or p.is_routine)
