"""Tests for cluster visual feature aggregation."""

from data_models.post import VisualFeatures
from processing.features import TOP_N, aggregate_visual_features, top_tags


def test_top_tags_ranks_by_frequency():
    lists = [["cat", "dog"], ["dog"], ["bird", "dog", "cat"]]

    assert top_tags(lists, 2) == ["dog", "cat"]


def test_category_capped_at_limit_with_reproducible_ties():
    terms = [f"subject{i}" for i in range(11)]
    posts = [{"visual_features": {"subjects": [term]}} for term in terms]

    first = aggregate_visual_features(posts)
    second = aggregate_visual_features(posts)

    assert len(first.subjects) == 10
    assert first.subjects == terms[:10]
    assert first == second


def test_per_category_limits():
    tags = [f"t{i}" for i in range(20)]
    posts = [{"visual_features": {category: tags for category in TOP_N}}]

    features = aggregate_visual_features(posts)

    assert len(features.subjects) == 10
    assert len(features.style) == 10
    assert len(features.environment) == 10
    assert len(features.emotion) == 5
    assert len(features.motion) == 5


def test_accepts_models_and_missing_features(make_post):
    posts = [
        make_post(visual_features={"style": ["anime"]}),
        {"visual_features": VisualFeatures(style=["anime", "cinematic"])},
        {"visual_features": None},
    ]

    features = aggregate_visual_features(posts)

    assert features.style == ["anime", "cinematic"]
    assert features.subjects == []


def test_no_posts_gives_empty_features():
    assert aggregate_visual_features([]) == VisualFeatures()
