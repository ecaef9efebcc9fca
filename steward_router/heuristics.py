"""Keyword heuristics: task classification and complexity analysis.

Both functions are pure.  Matching is plain lower-cased substring search; no
tokenization or language understanding is attempted.
"""

import re
from dataclasses import dataclass
from typing import Any

from steward_router.models import ComplexityProfile, TaskClassification


@dataclass(frozen=True)
class TaskPattern:
    type: str
    keywords: tuple[str, ...]
    confidence: float


# Declaration order breaks ties.
TASK_PATTERNS: tuple[TaskPattern, ...] = (
    TaskPattern("debug", ("debug", "fix", "error", "bug", "broken"), 0.9),
    TaskPattern("summarize", ("summarize", "summary", "tldr", "brief"), 0.9),
    TaskPattern("research", ("research", "find out", "investigate", "lookup"), 0.9),
    TaskPattern("write", ("write", "compose", "create", "draft"), 0.8),
    TaskPattern("analyze", ("analyze", "examine", "evaluate", "assess"), 0.8),
    TaskPattern("explain", ("explain", "describe", "how does", "what is"), 0.7),
    TaskPattern("code", ("code", "function", "script", "program", "implement"), 0.8),
    TaskPattern("sensitive", ("private", "confidential", "personal", "secret"), 0.9),
    TaskPattern("route", ("route", "direct", "forward", "which model"), 0.6),
    TaskPattern("general", ("help", "assist", "question", "advice"), 0.3),
)

MULTI_MATCH_BOOST = 1.2

SENSITIVE_TASK_TYPES = frozenset({"sensitive", "private", "confidential", "personal"})
PRIVACY_PATTERN = re.compile(r"\b(private|confidential|personal|secret)\b", re.IGNORECASE)

COMPLEX_TASK_TYPES = frozenset({"complex_reasoning", "advanced_analysis", "expert_level", "multi_domain"})
SPECIALIZED_TASK_TYPES = frozenset({"image_processing", "audio_transcription", "batch", "specialized"})
ROUTINE_TASK_TYPES = frozenset({"route", "quick_query", "fallback", "sensitive"})

COMPLEX_KEYWORDS = ("complex", "advanced", "detailed", "comprehensive", "expert", "analysis")
SPECIALIZED_KEYWORDS = ("image", "audio", "batch", "process", "convert", "transcribe")
QUICK_KEYWORDS = ("quick", "simple", "brief", "fast", "route")

UNKNOWN = TaskClassification(type="unknown", confidence=0.0, keywords=())


def is_privacy_sensitive(text: Any) -> bool:
    return isinstance(text, str) and bool(PRIVACY_PATTERN.search(text))


def classify_task(text: Any) -> TaskClassification:
    """Map raw task text to a ``TaskClassification``.

    Each pattern scores ``matches × base``, boosted by 1.2 when more than one
    of its keywords matched.  The highest raw score wins; the reported
    confidence is capped at 1.0.
    """
    if not text or not isinstance(text, str):
        return UNKNOWN

    lowered = text.lower()
    best_type, best_score, best_keywords = "general", 0.0, ()

    for pattern in TASK_PATTERNS:
        matched = tuple(k for k in pattern.keywords if k in lowered)
        score = len(matched) * pattern.confidence
        if len(matched) > 1:
            score *= MULTI_MATCH_BOOST
        if score > best_score:
            best_type, best_score, best_keywords = pattern.type, score, matched

    return TaskClassification(
        type=best_type,
        confidence=min(best_score, 1.0),
        keywords=best_keywords,
    )


def analyze_complexity(task_type: str, text: Any = "") -> ComplexityProfile:
    """Derive a coarse complexity profile from task type and text.

    The task type sets the base level; at most one keyword family then
    upgrades it.  A level is never lowered.
    """
    lowered = text.lower() if isinstance(text, str) else ""

    level = "medium"
    confidence = 0.5
    advanced = specialized = batch = routine = False

    if task_type in COMPLEX_TASK_TYPES:
        level, advanced, confidence = "high", True, 0.8
    elif task_type in SPECIALIZED_TASK_TYPES:
        specialized, confidence = True, 0.8
        batch = task_type == "batch"
    elif task_type in ROUTINE_TASK_TYPES:
        level, routine, confidence = "low", True, 0.8

    if any(k in lowered for k in COMPLEX_KEYWORDS) and level != "high":
        level, advanced = "high", True
        confidence = min(confidence + 0.2, 0.9)
    elif any(k in lowered for k in SPECIALIZED_KEYWORDS) and level == "medium":
        specialized = True
        confidence = min(confidence + 0.1, 0.8)
    elif any(k in lowered for k in QUICK_KEYWORDS) and level == "low":
        routine = True
        confidence = min(confidence + 0.1, 0.8)

    return ComplexityProfile(
        level=level,
        confidence=confidence,
        requires_advanced_reasoning=advanced,
        requires_specialization=specialized,
        is_batch_processing=batch,
        is_routine=routine,
    )
