"""Representative visual tag selection for clusters."""

from collections import Counter

from data_models.post import VisualFeatures

# Tags kept per category
TOP_N = {
    "subjects": 10,
    "emotion": 5,
    "style": 10,
    "motion": 5,
    "environment": 10,
}


def top_tags(tag_lists, limit: int) -> list[str]:
    """Most frequent tags across several lists.

    Ties keep first-encountered order, so output is reproducible for the
    same input order.
    """
    counts = Counter()
    for tags in tag_lists:
        counts.update(tags or [])
    # Counter preserves insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [tag for tag, _ in ranked[:limit]]


def aggregate_visual_features(posts: list, limits: dict[str, int] | None = None) -> VisualFeatures:
    """Aggregate members' visual features into the cluster's top tags.

    Args:
        posts: Objects exposing ``visual_features`` as a dict or VisualFeatures
        limits: Per-category cap, defaults to TOP_N

    Returns:
        VisualFeatures with at most ``limits[category]`` tags per category
    """
    limits = limits or TOP_N
    features = [_as_dict(post) for post in posts]
    return VisualFeatures(
        **{
            category: top_tags((feature.get(category) for feature in features), limit)
            for category, limit in limits.items()
        }
    )


def _as_dict(post) -> dict:
    features = post.get("visual_features") if isinstance(post, dict) else getattr(post, "visual_features", None)
    if features is None:
        return {}
    if isinstance(features, VisualFeatures):
        return features.model_dump()
    return features
