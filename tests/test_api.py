"""API tests using FastAPI's TestClient against an in-memory database."""

import pytest
from fastapi.testclient import TestClient

import api.routes.scheduler as scheduler_routes
import services.cluster_admin as cluster_admin
import services.prompt_catalog as prompt_catalog
import services.trend_pipeline as trend_pipeline
from api.main import app
from db.models import ClusterModel, PostModel, PromptModel
from scheduler.scheduler import TrendScheduler


@pytest.fixture
def client(session_factory, monkeypatch):
    monkeypatch.setattr(cluster_admin, "SessionLocal", session_factory)
    monkeypatch.setattr(prompt_catalog, "SessionLocal", session_factory)
    monkeypatch.setattr(trend_pipeline, "SessionLocal", session_factory)
    return TestClient(app)


@pytest.fixture
def seed(session_factory):
    """Insert clusters with member posts; returns their ids by label."""
    db = session_factory()
    try:
        posts = [
            PostModel(
                id=f"p{i}",
                platform="reddit" if i % 2 else "youtube",
                source_id=f"s{i}",
                source_url=f"https://example.com/{i}",
                media_type="image",
                caption="neon robot",
                engagement_velocity=10 * i,
                creator_id=f"c{i}",
                thumbnail_url=f"https://example.com/{i}.jpg",
                processed=True,
            )
            for i in range(1, 4)
        ]
        db.add_all(posts)

        layout = {
            "viral": dict(trend_score=95, status="viral", is_approved=True, post_ids=["p1", "p2"]),
            "trending": dict(trend_score=75, status="trending", is_approved=True, post_ids=["p3"]),
            "pending": dict(trend_score=50, status="emerging", is_approved=False, post_ids=[]),
        }
        ids = {}
        for label, fields in layout.items():
            cluster = ClusterModel(
                media_type="image",
                name=label.title(),
                generated_prompt=f"{label} prompt",
                visual_features={"subjects": ["robot"], "style": ["cyberpunk"]},
                platforms=["reddit", "youtube"],
                representative_post_id=(fields["post_ids"] or [None])[0],
                **fields,
            )
            db.add(cluster)
            db.flush()
            ids[label] = cluster.id
            for post_id in fields["post_ids"]:
                db.get(PostModel, post_id).cluster_id = cluster.id
        db.commit()
        return ids
    finally:
        db.close()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_clusters_paginates_by_score(client, seed):
    response = client.get("/api/clusters", params={"limit": 2})

    body = response.json()
    assert response.status_code == 200
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert [c["trend_score"] for c in body["clusters"]] == [95, 75]
    assert body["clusters"][0]["post_count"] == 2


def test_list_clusters_filters(client, seed):
    body = client.get("/api/clusters", params={"status": "emerging"}).json()
    assert [c["id"] for c in body["clusters"]] == [seed["pending"]]

    body = client.get("/api/clusters", params={"approved": "true"}).json()
    assert body["total"] == 2

    assert client.get("/api/clusters", params={"status": "bogus"}).status_code == 422


def test_trending_includes_viral(client, seed):
    trending = client.get("/api/clusters/trending").json()
    viral = client.get("/api/clusters/viral").json()
    emerging = client.get("/api/clusters/emerging").json()

    assert [c["id"] for c in trending] == [seed["viral"], seed["trending"]]
    assert [c["id"] for c in viral] == [seed["viral"]]
    assert emerging == []


def test_stats(client, seed):
    stats = client.get("/api/clusters/stats/overview").json()

    assert stats["totals"] == {"clusters": 3, "viral": 1, "trending": 1, "emerging": 1}
    assert stats["by_media_type"] == {"image": 3, "video": 0}
    assert {"platform": "reddit", "count": 3} in stats["platform_distribution"]


def test_get_cluster_with_posts(client, seed):
    response = client.get(f"/api/clusters/{seed['viral']}")

    body = response.json()
    assert response.status_code == 200
    assert [p["id"] for p in body["posts"]] == ["p1", "p2"]


def test_get_cluster_posts_sorted_by_velocity(client, seed):
    body = client.get(f"/api/clusters/{seed['viral']}/posts").json()

    assert [p["id"] for p in body["posts"]] == ["p2", "p1"]
    assert body["total"] == 2


def test_missing_cluster_is_404(client, seed):
    assert client.get("/api/clusters/nope").status_code == 404
    assert client.get("/api/clusters/nope/posts").status_code == 404
    assert client.put("/api/admin/clusters/nope/approve").status_code == 404
    assert client.post("/api/admin/clusters/nope/publish").status_code == 404


def test_prompt_variations(client, seed):
    body = client.get(f"/api/clusters/{seed['viral']}/prompts", params={"count": 2, "tool": "midjourney"}).json()

    assert body["cluster_id"] == seed["viral"]
    assert 1 <= len(body["prompts"]) <= 2
    assert all(p.endswith("--ar 9:16 --v 6 --style raw") for p in body["prompts"])
    assert body["negative_prompt"].startswith("blurry")


def test_pending_and_approve(client, seed):
    pending = client.get("/api/admin/clusters/pending").json()
    assert [c["id"] for c in pending] == [seed["pending"]]

    response = client.put(f"/api/admin/clusters/{seed['pending']}/approve")

    assert response.status_code == 200
    assert response.json()["is_approved"] is True
    assert client.get("/api/admin/clusters/pending").json() == []


def test_reject_withdraws_approval(client, seed):
    response = client.put(f"/api/admin/clusters/{seed['viral']}/reject", json={"reason": "off-topic"})

    body = response.json()
    assert body["is_rejected"] is True
    assert body["is_approved"] is False


def test_update_can_mark_declining(client, seed):
    response = client.put(
        f"/api/admin/clusters/{seed['trending']}",
        json={"name": "Fading robots", "status": "declining"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["name"] == "Fading robots"
    assert body["status"] == "declining"
    assert body["generated_prompt"] == "trending prompt"

    bad = client.put(f"/api/admin/clusters/{seed['trending']}", json={"status": "exploding"})
    assert bad.status_code == 422


def test_delete_releases_posts(client, seed, session_factory):
    response = client.delete(f"/api/admin/clusters/{seed['viral']}")

    assert response.json()["success"] is True
    db = session_factory()
    try:
        assert db.get(ClusterModel, seed["viral"]) is None
        post = db.get(PostModel, "p1")
        assert post.cluster_id is None
        assert post.processed is False
    finally:
        db.close()


def test_publish_requires_approval_and_happens_once(client, seed, session_factory):
    assert client.post(f"/api/admin/clusters/{seed['pending']}/publish").status_code == 400

    first = client.post(f"/api/admin/clusters/{seed['viral']}/publish")
    second = client.post(f"/api/admin/clusters/{seed['viral']}/publish")

    assert first.status_code == 200
    assert second.status_code == 400
    db = session_factory()
    try:
        prompt = db.query(PromptModel).one()
        assert prompt.id == first.json()["prompt_id"]
        assert prompt.preview_url == "https://example.com/1.jpg"
    finally:
        db.close()


def test_publish_and_notify_jobs(client, seed):
    published = client.post("/api/admin/jobs/publish").json()
    notified = client.post("/api/admin/jobs/notify").json()

    assert published["published"] == 2
    assert notified["sent"] == 1


def test_run_job_with_no_sources(client, seed, monkeypatch):
    monkeypatch.setattr(trend_pipeline.TrendPipeline, "_default_sources", lambda self: [])

    body = client.post("/api/admin/jobs/run").json()

    assert body == {"posts_processed": 0, "clusters_created": 0, "errors": []}


def test_weekly_job_also_publishes_and_notifies(client, seed, monkeypatch):
    monkeypatch.setattr(trend_pipeline.TrendPipeline, "_default_sources", lambda self: [])

    body = client.post("/api/admin/jobs/weekly").json()

    assert body == {"posts_processed": 0, "clusters_created": 0, "errors": [], "published": 2, "sent": 1}


def test_published_prompts_are_listed(client, seed):
    assert client.get("/api/prompts").json()["total"] == 0

    client.post("/api/admin/jobs/publish")
    body = client.get("/api/prompts").json()

    assert body["total"] == 2
    assert body["total_pages"] == 1
    assert [p["trend_score"] for p in body["prompts"]] == [95, 75]
    assert [p["cluster_id"] for p in body["prompts"]] == [seed["viral"], seed["trending"]]
    top = body["prompts"][0]
    assert top["text"] == "viral prompt"
    assert top["type"] == "image"
    assert top["tags"] == ["robot", "cyberpunk"]
    assert top["preview_url"] == "https://example.com/1.jpg"

    assert client.get("/api/prompts", params={"type": "video"}).json()["total"] == 0
    assert client.get("/api/prompts", params={"type": "all", "limit": 1}).json()["total_pages"] == 2
    assert [p["trend_score"] for p in client.get("/api/prompts/trending").json()] == [95, 75]


def test_get_prompt_by_id(client, seed):
    prompt_id = client.post(f"/api/admin/clusters/{seed['viral']}/publish").json()["prompt_id"]

    response = client.get(f"/api/prompts/{prompt_id}")

    assert response.status_code == 200
    assert response.json()["cluster_id"] == seed["viral"]
    assert client.get("/api/prompts/missing").status_code == 404


def test_scheduler_routes(client, monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "true")
    scheduler = TrendScheduler(config_path="missing.yaml", persist=False)
    monkeypatch.setattr(scheduler_routes, "get_scheduler", lambda: scheduler)

    status = client.get("/api/scheduler/status").json()
    assert status["available"] is True
    assert status["known_jobs"] == ["weekly_pipeline", "daily_viral_check"]

    unknown = client.post("/api/scheduler/jobs", json={"job_name": "nope", "interval_minutes": 5})
    assert unknown.status_code == 400

    added = client.post("/api/scheduler/jobs", json={"job_name": "daily_viral_check", "cron_expression": "0 6 * * *"})
    assert added.json()["job_id"] == "job_daily_viral_check"

    jobs = client.get("/api/scheduler/jobs").json()
    assert jobs["total"] == 1
    assert client.get("/api/scheduler/jobs/missing").status_code == 404
    assert client.delete("/api/scheduler/jobs/job_daily_viral_check").json()["success"] is True
