"""Lexical similarity between prepared posts.

Visual similarity is a weighted Jaccard over the five tag categories and
caption similarity is a two-document TF-IDF score. Both are keyword based;
no embeddings are involved.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from data_models.post import VISUAL_CATEGORIES

logger = logging.getLogger(__name__)

TOKEN_SPLIT = re.compile(r"\W+", re.ASCII)

# English stop words dropped from caption documents
STOP_WORDS = frozenset(
    [
        "about", "above", "after", "again", "all", "also", "am", "an", "and", "another",
        "any", "are", "as", "at", "be", "because", "been", "before", "being", "below",
        "between", "both", "but", "by", "came", "can", "cannot", "come", "could", "did",
        "do", "does", "doing", "during", "each", "few", "for", "from", "further", "get",
        "got", "has", "had", "he", "have", "her", "here", "him", "himself", "his", "how",
        "if", "in", "into", "is", "it", "its", "itself", "like", "make", "many", "me",
        "might", "more", "most", "much", "must", "my", "myself", "never", "now", "of", "on",
        "only", "or", "other", "our", "ours", "ourselves", "out", "over", "own",
        "said", "same", "see", "should", "since", "so", "some", "still", "such", "take", "than",
        "that", "the", "their", "theirs", "them", "themselves", "then", "there", "these", "they",
        "this", "those", "through", "to", "too", "under", "until", "up", "very", "was",
        "way", "we", "well", "were", "what", "where", "when", "which", "while", "who",
        "whom", "with", "would", "why", "you", "your", "yours", "yourself",
        "a", "b", "c", "d", "e", "f", "g", "h", "i", "j", "k", "l", "m", "n",
        "o", "p", "q", "r", "s", "t", "u", "v", "w", "x", "y", "z", "$", "1",
        "2", "3", "4", "5", "6", "7", "8", "9", "0", "_",
    ]
)

DEFAULT_VISUAL_WEIGHTS = {
    "subjects": 0.4,
    "emotion": 0.2,
    "style": 0.2,
    "motion": 0.1,
    "environment": 0.1,
}


def jaccard(a, b) -> float:
    """Jaccard index of two tag collections; 0 when either is empty."""
    if not a or not b:
        return 0.0
    set_a, set_b = set(a), set(b)
    return len(set_a & set_b) / len(set_a | set_b)


def tokenize(text: str) -> list[str]:
    """Lower-case text and split on runs of non-word characters."""
    return [token for token in TOKEN_SPLIT.split(text.lower()) if token]


def caption_similarity(first: str, second: str) -> float:
    """Score ``second`` against the corpus {first, second}.

    For each document and each token of ``second`` (with repetition) the
    score accumulates ``tf * idf`` where ``idf = 1 + ln(N / (1 + df))``.
    The sum is divided by 10 and capped at 1. The measure is directional;
    callers must not assume ``caption_similarity(a, b) == caption_similarity(b, a)``.

    Args:
        first: Caption of the item already in the corpus
        second: Caption used as the query

    Returns:
        Similarity in [0, 1]; 0 if either caption is blank
    """
    if not first or not second or not first.strip() or not second.strip():
        return 0.0

    documents = [
        Counter(token for token in tokenize(text) if token not in STOP_WORDS)
        for text in (first, second)
    ]
    corpus_size = len(documents)

    idf_cache: dict[str, float] = {}
    score = 0.0
    for token in tokenize(second):
        idf = idf_cache.get(token)
        if idf is None:
            doc_freq = sum(1 for document in documents if token in document)
            idf = float(1 + np.log(corpus_size / (1 + doc_freq)))
            idf_cache[token] = idf
        for document in documents:
            score += document.get(token, 0) * idf

    return min(score / 10, 1.0)


def _features_of(post) -> dict:
    features = getattr(post, "visual_features", None)
    if features is None and isinstance(post, dict):
        features = post.get("visual_features")
    if features is None:
        return {}
    if isinstance(features, dict):
        return features
    return {category: getattr(features, category, []) for category in VISUAL_CATEGORIES}


def _caption_of(post) -> str:
    if isinstance(post, dict):
        return post.get("caption") or ""
    return getattr(post, "caption", None) or ""


@dataclass
class SimilarityEngine:
    """Weighted visual + caption similarity.

    Attributes:
        visual_weight: Share of the total given to visual similarity
        caption_weight: Share of the total given to caption similarity
        category_weights: Per-category weights inside visual similarity
        caption_scorer: Function scoring two captions into [0, 1]
    """

    visual_weight: float = 0.6
    caption_weight: float = 0.4
    category_weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_VISUAL_WEIGHTS))
    caption_scorer: Callable[[str, str], float] = caption_similarity

    def visual_similarity(self, first: dict, second: dict) -> float:
        """Weighted Jaccard over the five visual categories."""
        return sum(
            jaccard(first.get(category) or [], second.get(category) or []) * weight
            for category, weight in self.category_weights.items()
        )

    def caption_similarity(self, first: str, second: str) -> float:
        return self.caption_scorer(first, second)

    def total_similarity(self, post, other) -> float:
        """Similarity between a candidate post and a cluster representative.

        Captions are scored with ``other`` as the query against the corpus
        {post, other}.

        Args:
            post: Candidate (PreparedPost, model or dict)
            other: Comparison target, usually a representative

        Returns:
            Combined similarity in [0, 1]
        """
        visual = self.visual_similarity(_features_of(post), _features_of(other))
        caption = self.caption_similarity(_caption_of(post), _caption_of(other))
        return visual * self.visual_weight + caption * self.caption_weight
