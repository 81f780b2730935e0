"""Processing modules for PromptPulse."""

from processing.clustering import (
    PostClusterer,
    PreparedPost,
    TrendCluster,
    add_to_cluster,
    cluster_posts,
    prepare_post,
    recluster_posts,
)
from processing.features import aggregate_visual_features
from processing.prompt_builder import PromptBuilder, generate_cluster_name, generate_prompt
from processing.scoring import TrendScorer, calculate_trend_score, classify_trend, compute_cluster_metrics
from processing.signal_extractor import SignalExtractor, extract_signals, merge_signals
from processing.similarity import SimilarityEngine, caption_similarity, jaccard
from processing.vocabularies import DEFAULT_VOCABULARY, KeywordVocabulary

__all__ = [
    "KeywordVocabulary",
    "DEFAULT_VOCABULARY",
    "SignalExtractor",
    "extract_signals",
    "merge_signals",
    "SimilarityEngine",
    "jaccard",
    "caption_similarity",
    "PreparedPost",
    "TrendCluster",
    "PostClusterer",
    "prepare_post",
    "cluster_posts",
    "recluster_posts",
    "add_to_cluster",
    "compute_cluster_metrics",
    "TrendScorer",
    "calculate_trend_score",
    "classify_trend",
    "aggregate_visual_features",
    "PromptBuilder",
    "generate_prompt",
    "generate_cluster_name",
]
