"""Keyword signal extraction from titles, captions and descriptions."""

import logging
import re

from data_models.post import VISUAL_CATEGORIES, TextSignals, VisualFeatures
from processing.vocabularies import DEFAULT_VOCABULARY, KeywordVocabulary

logger = logging.getLogger(__name__)

HASHTAG_PATTERN = re.compile(r"#(\w+)")

# Per-category contribution to signal strength
SIGNAL_WEIGHTS = {
    "style": 2.0,
    "emotion": 1.5,
    "motion": 1.0,
    "quality": 0.5,
    "subjects": 2.0,
    "environment": 1.5,
    "ai_tools": 3.0,
}


def _dedupe(items) -> list[str]:
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(items))


class SignalExtractor:
    """Extract categorized keyword signals from free text."""

    def __init__(self, vocabulary: KeywordVocabulary = DEFAULT_VOCABULARY):
        """Initialize extractor.

        Args:
            vocabulary: Keyword lists to match against. Shared, never copied.
        """
        self.vocabulary = vocabulary
        self._word_patterns: dict[str, re.Pattern] = {}
        self._tool_patterns = [
            (tool, re.compile(rf"\b{re.escape(tool).replace(re.escape('-'), '[- ]?')}\b", re.IGNORECASE))
            for tool in vocabulary.ai_tools
        ]

    def _matches(self, term: str, lower_text: str) -> bool:
        if " " in term:
            return term in lower_text
        pattern = self._word_patterns.get(term)
        if pattern is None:
            pattern = re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)
            self._word_patterns[term] = pattern
        return pattern.search(lower_text) is not None

    def extract(self, text: str | None) -> TextSignals:
        """Extract signals from a block of text.

        Multi-word terms match as substrings, single words only on word
        boundaries. Results follow vocabulary declaration order.

        Args:
            text: Raw text, may be empty

        Returns:
            TextSignals with one deduplicated list per category
        """
        text = text or ""
        lower = text.lower()

        found = {}
        for category, terms in self.vocabulary.categories():
            found[category] = _dedupe(term for term in terms if self._matches(term, lower))

        found["ai_tools"] = [tool for tool, pattern in self._tool_patterns if pattern.search(lower)]
        found["hashtags"] = _dedupe(tag.lower() for tag in HASHTAG_PATTERN.findall(text))

        return TextSignals(**found)

    def extract_from_fields(
        self,
        title: str | None = None,
        description: str | None = None,
        caption: str | None = None,
        comments: list[str] | None = None,
    ) -> TextSignals:
        """Extract signals from several text fields joined by single spaces."""
        parts = [title or "", description or "", caption or "", *(comments or [])]
        return self.extract(" ".join(parts))

    @staticmethod
    def signal_strength(signals: TextSignals) -> float:
        """Weighted signal count scaled to 0-100.

        Informational only; nothing in scoring depends on it.
        """
        total = sum(len(getattr(signals, category)) * weight for category, weight in SIGNAL_WEIGHTS.items())
        return min(100.0, total * 5)

    @staticmethod
    def merge(visual: VisualFeatures, text: TextSignals) -> VisualFeatures:
        """Per-category union of visual tags and text signals.

        Visual tags come first; order is otherwise preserved.
        """
        merged = {
            category: _dedupe([*getattr(visual, category), *getattr(text, category)])
            for category in VISUAL_CATEGORIES
        }
        return VisualFeatures(**merged)


_default_extractor: SignalExtractor | None = None


def get_extractor() -> SignalExtractor:
    """Get the shared extractor built on the default vocabulary."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = SignalExtractor()
    return _default_extractor


def extract_signals(text: str | None) -> TextSignals:
    """Convenience function to extract signals with the default vocabulary."""
    return get_extractor().extract(text)


def merge_signals(visual: VisualFeatures, text: TextSignals) -> VisualFeatures:
    """Convenience function for SignalExtractor.merge."""
    return SignalExtractor.merge(visual, text)
