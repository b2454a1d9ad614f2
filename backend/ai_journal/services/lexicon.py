"""
Fallback Lexicon
================
The keyword tables that drive the fallback mood analyzer. Kept as data
so the policy can be tuned (or replaced wholesale from a JSON file)
without touching the matching code.

Ordering matters in two places:
- ``moods``: first category with a trigger present wins. A text with
  both "happy" and "worried" is Joyful because Joyful is checked first.
- ``tags``: emitted in table order.

Triggers match whole words only, so inflections are listed explicitly
("stress", "stressed", "stressful"). Multi-word triggers are fine.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from ai_journal.models.entry import Mood

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Mood triggers, in priority order
# ---------------------------------------------------------------------------

_MOOD_TRIGGERS: tuple[tuple[Mood, tuple[str, ...]], ...] = (
    (Mood.JOYFUL, (
        "happy", "happiest", "joy", "joyful", "excited", "exciting", "amazing",
        "wonderful", "great", "love", "loved", "loving", "perfect", "fantastic",
        "thrilled", "delighted",
    )),
    (Mood.FRUSTRATED, (
        "angry", "furious", "mad", "frustrated", "frustrating", "annoyed",
        "annoying", "irritated", "passive-aggressive", "took credit",
        "exhausting", "unfair", "fed up",
    )),
    (Mood.NERVOUS, (
        "nervous", "worried", "worry", "anxious", "anxiety", "scared",
        "afraid", "imposter", "interview", "overwhelmed", "stress",
        "stressed", "stressful", "panic",
    )),
    (Mood.LONELY, (
        "sad", "lonely", "alone", "depressed", "empty", "hurt", "crying",
        "cried", "invisible", "nobody", "isolated",
    )),
    (Mood.PEACEFUL, (
        "peaceful", "peace", "calm", "content", "relaxed", "relaxing", "yoga",
        "meditation", "meditated", "quiet", "serene",
    )),
    (Mood.INSPIRED, (
        "inspired", "inspiring", "motivated", "hopeful", "passionate",
        "determined", "goal", "goals",
    )),
)


# ---------------------------------------------------------------------------
# Score words
# ---------------------------------------------------------------------------

_POSITIVE_WORDS: frozenset[str] = frozenset({
    "happy", "happier", "happiest", "joy", "joyful", "excited", "exciting",
    "grateful", "thankful", "amazing", "wonderful", "great", "love", "loved",
    "loving", "excellent", "fantastic", "perfect", "proud", "calm", "hopeful",
})

_NEGATIVE_WORDS: frozenset[str] = frozenset({
    "sad", "angry", "furious", "frustrated", "terrible", "awful", "hate",
    "hated", "disappointed", "worried", "stressed", "anxious", "lonely",
    "depressed", "scared", "afraid", "unfair", "miserable",
})


# ---------------------------------------------------------------------------
# Topic tags
# ---------------------------------------------------------------------------

_TAG_TRIGGERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("work", ("work", "job", "boss", "coworker", "coworkers", "colleague",
              "colleagues", "office", "meeting", "deadline", "interview")),
    ("family", ("family", "parent", "parents", "mom", "mum", "dad", "mother",
                "father", "sister", "brother", "kids", "children")),
    ("relationships", ("friend", "friends", "social", "partner", "boyfriend",
                       "girlfriend", "husband", "wife", "date", "dating")),
    ("health", ("health", "healthy", "exercise", "gym", "run", "running",
                "sleep", "doctor", "sick", "workout")),
    ("travel", ("travel", "travelling", "traveling", "vacation", "holiday",
                "trip", "flight", "beach")),
    ("creativity", ("creative", "painting", "drawing", "writing", "music",
                    "art", "project", "design")),
    ("mental-health", ("anxiety", "anxious", "depressed", "depression",
                       "therapy", "therapist", "panic", "overwhelmed",
                       "meditation", "imposter")),
    ("gratitude", ("grateful", "thankful", "gratitude", "blessed",
                   "appreciate", "appreciated")),
)


# ---------------------------------------------------------------------------
# Summary templates
# ---------------------------------------------------------------------------

_SUMMARIES: dict[Mood, str] = {
    Mood.JOYFUL: "Sharing positive experiences and joyful moments from the day.",
    Mood.FRUSTRATED: "Expressing frustration about a challenging situation.",
    Mood.NERVOUS: "Feeling anxious and nervous about upcoming challenges or self-doubt.",
    Mood.LONELY: "Processing feelings of loneliness and emotional isolation.",
    Mood.PEACEFUL: "Reflecting on moments of peace and tranquility.",
    Mood.INSPIRED: "Feeling motivated and inspired by recent experiences or realizations.",
    Mood.REFLECTIVE: "Deep reflection on personal thoughts and life experiences.",
}


# ---------------------------------------------------------------------------
# Lexicon value
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Lexicon:
    moods: tuple[tuple[Mood, tuple[str, ...]], ...]
    positive_words: frozenset[str]
    negative_words: frozenset[str]
    tags: tuple[tuple[str, tuple[str, ...]], ...]
    summaries: dict[Mood, str]
    neutral_score: float = 0.5
    score_step: float = 0.1
    default_mood: Mood = Mood.REFLECTIVE

    @classmethod
    def from_json(cls, path: str | Path) -> Lexicon:
        """Load a lexicon from a JSON file.

        Any top-level key that is absent keeps the built-in value, so an
        override file can retune just the mood triggers, say. Expected shape::

            {
              "moods": [["Joyful", ["happy", "..."]], ...],
              "positive_words": ["..."],
              "negative_words": ["..."],
              "tags": [["work", ["job", "..."]], ...],
              "summaries": {"Joyful": "...", ...},
              "neutral_score": 0.5,
              "score_step": 0.1
            }

        Raises ValueError for unknown mood names or a summaries table that
        does not cover every mood.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        base = DEFAULT_LEXICON

        moods = base.moods
        if "moods" in raw:
            moods = tuple(
                (Mood(name), tuple(t.lower() for t in triggers))
                for name, triggers in raw["moods"]
            )

        tags = base.tags
        if "tags" in raw:
            tags = tuple(
                (tag, tuple(t.lower() for t in triggers))
                for tag, triggers in raw["tags"]
            )

        summaries = dict(base.summaries)
        for name, template in raw.get("summaries", {}).items():
            summaries[Mood(name)] = template

        missing = [m.value for m in Mood if not (summaries.get(m) or "").strip()]
        if missing:
            raise ValueError(f"Lexicon summaries missing for: {', '.join(missing)}")

        lexicon = cls(
            moods=moods,
            positive_words=frozenset(
                w.lower() for w in raw.get("positive_words", base.positive_words)
            ),
            negative_words=frozenset(
                w.lower() for w in raw.get("negative_words", base.negative_words)
            ),
            tags=tags,
            summaries=summaries,
            neutral_score=float(raw.get("neutral_score", base.neutral_score)),
            score_step=float(raw.get("score_step", base.score_step)),
        )
        logger.info(
            "Loaded mood lexicon from %s (%d mood categories, %d tag categories)",
            path,
            len(lexicon.moods),
            len(lexicon.tags),
        )
        return lexicon


DEFAULT_LEXICON = Lexicon(
    moods=_MOOD_TRIGGERS,
    positive_words=_POSITIVE_WORDS,
    negative_words=_NEGATIVE_WORDS,
    tags=_TAG_TRIGGERS,
    summaries=_SUMMARIES,
)
