"""Tests for cluster metrics, trend score and status classification."""

import pytest

from data_models.cluster import ClusterMetrics
from processing.scoring import (
    TrendScorer,
    calculate_trend_score,
    classify_trend,
    compute_cluster_metrics,
    get_metrics_dict,
)


def test_metrics_for_three_member_cluster(make_post):
    posts = [
        make_post(creator_id="a", platform="reddit", engagement_velocity=10, likes=1, views=100),
        make_post(creator_id="a", platform="youtube", engagement_velocity=20, likes=2, views=200),
        make_post(creator_id="b", platform="youtube", engagement_velocity=30, likes=3, views=300),
    ]

    metrics = compute_cluster_metrics(posts)

    assert metrics.creator_count == 2
    assert metrics.platform_count == 2
    assert metrics.avg_engagement_velocity == pytest.approx(20)
    assert metrics.total_posts == 3
    assert metrics.total_likes == 6
    assert metrics.total_views == 600


def test_metrics_for_empty_cluster():
    assert compute_cluster_metrics([]) == ClusterMetrics()


def test_score_with_capped_sub_scores():
    metrics = ClusterMetrics(avg_engagement_velocity=100, creator_count=20, platform_count=10, total_posts=50)

    score = calculate_trend_score(metrics)

    assert score == 64
    assert classify_trend(score) == "emerging"


def test_score_rounds_half_up():
    # 0.3 * 10 + 0.2 * 25 + 0.1 * 5 = 8.5
    metrics = ClusterMetrics(creator_count=1, platform_count=1, total_posts=1)

    assert calculate_trend_score(metrics) == 9


def test_score_is_bounded():
    high = ClusterMetrics(avg_engagement_velocity=10_000, creator_count=100, platform_count=100, total_posts=100)

    assert calculate_trend_score(high) == 100
    assert calculate_trend_score(ClusterMetrics()) == 0


def test_custom_weights():
    scorer = TrendScorer(velocity_weight=1.0, creator_weight=0, platform_weight=0, volume_weight=0)

    assert scorer.calculate_score(ClusterMetrics(avg_engagement_velocity=505)) == 51


@pytest.mark.parametrize(
    "score, status",
    [
        (100, "viral"),
        (91, "viral"),
        (90, "trending"),
        (71, "trending"),
        (70, "emerging"),
        (41, "emerging"),
        (40, "stable"),
        (0, "stable"),
    ],
)
def test_classification_boundaries(score, status):
    assert TrendScorer.classify(score) == status


def test_metrics_dict_rounds_velocity():
    metrics = ClusterMetrics(avg_engagement_velocity=12.3456, total_posts=2)

    data = get_metrics_dict(metrics)

    assert data["avg_engagement_velocity"] == 12.35
    assert data["total_posts"] == 2
