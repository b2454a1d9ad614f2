"""
Fallback Mood Analyzer
======================
Deterministic, network-free mood analysis used whenever the language
model is unavailable, disabled, or returns something unusable.

Pipeline (all case-insensitive, all linear scans of the text):
    title + text → mood     (first lexicon category with a trigger present)
                 → score    (0.5 ± 0.1 per positive/negative word, clamped)
                 → summary  (per-mood template)
                 → tags     (every topic category with a trigger present)

The analyzer never raises. An empty text yields the neutral default.
"""

from __future__ import annotations

import re
from typing import Optional

from ai_journal.config import get_settings
from ai_journal.models.entry import AnalysisResult, Mood, clamp_score
from ai_journal.services.lexicon import DEFAULT_LEXICON, Lexicon


def _compile_triggers(triggers: tuple[str, ...]) -> Optional[re.Pattern[str]]:
    """One alternation per category; whole-word matches only."""
    if not triggers:
        return None
    alternation = "|".join(re.escape(t) for t in triggers)
    return re.compile(rf"\b(?:{alternation})\b")


class FallbackAnalyzer:
    """Keyword-based mood analysis driven by a ``Lexicon``.

    Usage:
        analyzer = FallbackAnalyzer()
        result = analyzer.analyze("I have an interview tomorrow and I'm so anxious")
        # result.mood → Mood.NERVOUS, result.tags → ["work", "mental-health"]

    Stateless after construction, so one instance is shared process-wide.
    """

    def __init__(self, lexicon: Lexicon | None = None) -> None:
        self._lexicon = lexicon or DEFAULT_LEXICON

        self._mood_patterns: list[tuple[Mood, re.Pattern[str]]] = []
        for mood, triggers in self._lexicon.moods:
            pattern = _compile_triggers(triggers)
            if pattern is not None:
                self._mood_patterns.append((mood, pattern))

        self._tag_patterns: list[tuple[str, re.Pattern[str]]] = []
        for tag, triggers in self._lexicon.tags:
            pattern = _compile_triggers(triggers)
            if pattern is not None:
                self._tag_patterns.append((tag, pattern))

        # Scored with the same word boundaries as the mood triggers
        self._positive_pattern = _compile_triggers(tuple(sorted(self._lexicon.positive_words)))
        self._negative_pattern = _compile_triggers(tuple(sorted(self._lexicon.negative_words)))

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    def analyze(self, text: str, title: Optional[str] = None) -> AnalysisResult:
        combined = f"{title}\n{text or ''}" if title else (text or "")
        lowered = combined.lower()

        mood = self.classify_mood(lowered)
        return AnalysisResult(
            mood=mood,
            summary=self._lexicon.summaries[mood],
            mood_score=self.score(lowered),
            tags=self.extract_tags(lowered),
            source="fallback",
        )

    # ------------------------------------------------------------------
    # Individual stages
    # ------------------------------------------------------------------

    def classify_mood(self, lowered: str) -> Mood:
        for mood, pattern in self._mood_patterns:
            if pattern.search(lowered):
                return mood
        return self._lexicon.default_mood

    def score(self, lowered: str) -> float:
        positive = len(self._positive_pattern.findall(lowered)) if self._positive_pattern else 0
        negative = len(self._negative_pattern.findall(lowered)) if self._negative_pattern else 0

        raw = self._lexicon.neutral_score + self._lexicon.score_step * (positive - negative)
        # round() keeps 0.5 + 0.1 * 2 at 0.7 rather than 0.7000000000000001
        return round(clamp_score(raw), 4)

    def extract_tags(self, lowered: str) -> list[str]:
        tags: list[str] = []
        for tag, pattern in self._tag_patterns:
            if tag not in tags and pattern.search(lowered):
                tags.append(tag)
        return tags


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_analyzer: FallbackAnalyzer | None = None


def get_fallback_analyzer() -> FallbackAnalyzer:
    """Process-wide analyzer, using ``mood_lexicon_path`` when configured."""
    global _default_analyzer
    if _default_analyzer is None:
        path = get_settings().mood_lexicon_path
        lexicon = Lexicon.from_json(path) if path else None
        _default_analyzer = FallbackAnalyzer(lexicon)
    return _default_analyzer
