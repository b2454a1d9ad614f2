"""
Mood Analyzer Service
=====================
Derives (mood, score, summary, tags) for a journal entry using the
Claude API, with the keyword fallback standing in on any failure.

FLOW:
    1. Blank text is rejected with InvalidInputError (a caller bug,
       not an outage, so it is the one error that escapes)
    2. Kill switch off or no API key → fallback, no network call
    3. Claude returns JSON: mood, mood_score, summary, tags
    4. Response is parsed tolerantly (code fences, stray prose) and
       validated; mood is mapped onto the closed vocabulary
    5. Missing optional fields (score, tags) are filled from the
       fallback analysis of the same text; Claude's values win otherwise
    6. Any external or shape failure is logged and the fallback result
       is returned instead. analyze() never fails for those reasons.

Every result carries ``source`` so callers can tell which path ran.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ai_journal.config import Settings, get_settings
from ai_journal.models.entry import AnalysisResult, ExternalAnalysis, Mood
from ai_journal.services.fallback import FallbackAnalyzer, get_fallback_analyzer

logger = logging.getLogger(__name__)

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"

_SYSTEM_PROMPT = """\
You are a compassionate journaling assistant. You receive a single diary \
entry and return a structured analysis of it.

Rules:
- Return ONLY valid JSON with no markdown formatting, no backticks, no explanation.
- Choose the mood that best reflects the overall emotional tone of the entry.
- Write the summary in the third person, 1-2 sentences, without quoting the entry.

Required JSON schema:
{
  "mood": "<exactly one of: Joyful, Frustrated, Nervous, Lonely, Peaceful, \
Inspired, Reflective>",
  "mood_score": <0.0-1.0 float: 0.0 very negative, 0.5 neutral, 1.0 very positive>,
  "summary": "<1-2 sentence summary of what the person wrote about>",
  "tags": [<0-5 short lowercase topic strings, e.g. "work", "family", \
"health", "travel">]
}
"""

# Labels the model tends to produce even when asked for the closed set
_MOOD_SYNONYMS: dict[str, Mood] = {
    "happy": Mood.JOYFUL,
    "excited": Mood.JOYFUL,
    "grateful": Mood.JOYFUL,
    "joy": Mood.JOYFUL,
    "positive": Mood.JOYFUL,
    "angry": Mood.FRUSTRATED,
    "annoyed": Mood.FRUSTRATED,
    "irritated": Mood.FRUSTRATED,
    "anxious": Mood.NERVOUS,
    "worried": Mood.NERVOUS,
    "stressed": Mood.NERVOUS,
    "scared": Mood.NERVOUS,
    "sad": Mood.LONELY,
    "negative": Mood.LONELY,
    "calm": Mood.PEACEFUL,
    "content": Mood.PEACEFUL,
    "relaxed": Mood.PEACEFUL,
    "hopeful": Mood.INSPIRED,
    "motivated": Mood.INSPIRED,
    "determined": Mood.INSPIRED,
    "neutral": Mood.REFLECTIVE,
    "confused": Mood.REFLECTIVE,
    "thoughtful": Mood.REFLECTIVE,
}

_MOODS_BY_NAME: dict[str, Mood] = {m.value.lower(): m for m in Mood}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InvalidInputError(ValueError):
    """Journal text is empty or whitespace-only."""


class ExternalServiceError(Exception):
    """Claude API unreachable, timed out, returned non-2xx, or no API key."""


class ResponseShapeError(Exception):
    """Claude responded, but not with a usable analysis."""


def normalise_mood(label: str) -> Mood:
    """Map a free-text mood label onto the closed vocabulary.

    Raises ResponseShapeError when the label has no known mapping.
    """
    key = label.strip().strip(".!\"'").casefold()
    if key in _MOODS_BY_NAME:
        return _MOODS_BY_NAME[key]
    if key in _MOOD_SYNONYMS:
        return _MOOD_SYNONYMS[key]
    raise ResponseShapeError(f"Mood label outside vocabulary: {label!r}")


class MoodAnalyzerService:
    """Analyses journal text via the Claude API, falling back to keywords.

    All external configuration is injected so tests can run without
    ambient settings:

        analyzer = MoodAnalyzerService(api_key="sk-...", timeout=5.0)
        result = await analyzer.analyze("Long day, but the run cleared my head")
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 300,
        timeout: float = 10.0,
        max_retries: int = 1,
        enabled: bool = True,
        fallback: FallbackAnalyzer | None = None,
        api_url: str = ANTHROPIC_MESSAGES_URL,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._enabled = enabled
        self._fallback = fallback or FallbackAnalyzer()
        self._api_url = api_url

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        fallback: FallbackAnalyzer | None = None,
    ) -> MoodAnalyzerService:
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            timeout=settings.analysis_timeout_seconds,
            max_retries=settings.analysis_max_retries,
            enabled=settings.enable_ai_analysis,
            fallback=fallback,
        )

    async def analyze(self, text: str, title: Optional[str] = None) -> AnalysisResult:
        """Return a fully-populated analysis for *text*.

        Raises InvalidInputError for blank text. Every other failure is
        logged and answered with the fallback analysis.
        """
        if not text or not text.strip():
            raise InvalidInputError("Journal entry text is required")

        fallback_result = self._fallback.analyze(text, title)

        if not self._enabled:
            logger.debug("AI analysis disabled, using keyword fallback")
            return fallback_result

        raw_response = ""
        try:
            raw_response = await self._call_claude_api(text, title)
            external = self._parse_response(raw_response)
            mood = normalise_mood(external.mood)
        except ExternalServiceError as exc:
            logger.warning("Claude analysis unavailable, using keyword fallback: %s", exc)
            return fallback_result
        except ResponseShapeError as exc:
            logger.warning(
                "Unusable Claude analysis (%s), using keyword fallback: %s",
                exc,
                raw_response[:200] if raw_response else "empty",
            )
            return fallback_result
        except Exception:
            logger.exception("Unexpected error during Claude analysis, using keyword fallback")
            return fallback_result

        return AnalysisResult(
            mood=mood,
            summary=external.summary,
            mood_score=(
                external.mood_score
                if external.mood_score is not None
                else fallback_result.mood_score
            ),
            tags=external.tags if external.tags is not None else fallback_result.tags,
            source="external",
        )

    async def _call_claude_api(self, text: str, title: Optional[str]) -> str:
        """Send the entry to Claude and return the concatenated text blocks."""
        if not self._api_key:
            raise ExternalServiceError("No Anthropic API key configured")

        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }

        content = f"Title: {title}\n\n{text}" if title else text
        payload = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": _SYSTEM_PROMPT,
            "messages": [
                {
                    "role": "user",
                    "content": content,
                }
            ],
        }

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await self._post_with_retry(client, headers, payload)

        if not response.is_success:
            raise ExternalServiceError(f"Claude API returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseShapeError("Claude API returned a non-JSON body") from exc

        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise ResponseShapeError("Claude API response has no content blocks")

        # Extract text from the response content blocks
        text_parts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        return "\n".join(text_parts)

    async def _post_with_retry(
        self, client: httpx.AsyncClient, headers: dict, payload: dict
    ) -> httpx.Response:
        """POST to the Messages API, retrying transport errors only.

        Connect failures and timeouts get up to ``max_retries`` further
        attempts. HTTP error statuses come back as a response and are
        not retried.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await client.post(self._api_url, headers=headers, json=payload)
            except httpx.TransportError as exc:
                if attempt > self._max_retries:
                    raise ExternalServiceError(
                        f"Claude API request failed after {attempt} attempt(s): "
                        f"{type(exc).__name__}"
                    ) from exc
                logger.info(
                    "Claude API transport error (%s), retrying (attempt %d of %d)",
                    type(exc).__name__,
                    attempt + 1,
                    self._max_retries + 1,
                )
            except httpx.HTTPError as exc:
                raise ExternalServiceError(
                    f"Claude API request failed: {type(exc).__name__}"
                ) from exc

    def _parse_response(self, raw_response: str) -> ExternalAnalysis:
        """Parse Claude's reply into a validated ExternalAnalysis.

        Handles common Claude response quirks: markdown code fences,
        leading/trailing whitespace, and extra commentary before/after JSON.
        """
        text = raw_response.strip()

        # Cut to the outermost JSON object. This also drops code fences and
        # any commentary before or after them.
        start = text.find("{")
        end = text.rfind("}") + 1
        if start != -1 and end > start:
            text = text[start:end]

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ResponseShapeError(f"Invalid JSON: {exc.msg}") from exc

        if not isinstance(parsed, dict):
            raise ResponseShapeError("Expected a JSON object")

        try:
            return ExternalAnalysis.model_validate(parsed)
        except ValidationError as exc:
            fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in exc.errors())
            raise ResponseShapeError(f"Invalid fields: {fields}") from exc


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_analyzer: MoodAnalyzerService | None = None


def get_mood_analyzer() -> MoodAnalyzerService:
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = MoodAnalyzerService.from_settings(
            get_settings(),
            fallback=get_fallback_analyzer(),
        )
    return _default_analyzer
