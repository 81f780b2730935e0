"""Tests for scheduler job registration with an in-memory job store."""

import pytest

import scheduler.scheduler as scheduler_module
from scheduler.scheduler import (
    DEFAULT_JOBS,
    JOB_FUNCTIONS,
    TrendScheduler,
    register_default_jobs,
    run_daily_viral_check,
    run_weekly_job,
)


@pytest.fixture
def scheduler(monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "true")
    return TrendScheduler(config_path="missing.yaml", persist=False)


def test_disabled_by_env(monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")

    disabled = TrendScheduler(config_path="missing.yaml", persist=False)

    assert disabled.is_available is False
    assert disabled.add_job("weekly_pipeline", run_weekly_job, cron_expression="0 0 * * sun") is None
    assert disabled.get_jobs() == []
    assert disabled.start() is False


def test_register_default_jobs(scheduler):
    added = register_default_jobs(scheduler)

    assert added == ["job_weekly_pipeline", "job_daily_viral_check"]
    assert scheduler.registered_jobs == list(DEFAULT_JOBS)

    weekly = scheduler.get_job("job_weekly_pipeline")
    assert weekly["name"] == "Weekly Pipeline"
    assert "sun" in weekly["trigger"]


def test_config_jobs_override_defaults(scheduler):
    scheduler.config = {
        "jobs": {
            "daily_viral_check": {"enabled": True, "interval_minutes": 30},
            "weekly_pipeline": {"enabled": False, "cron": "0 0 * * sun"},
            "unknown_job": {"enabled": True, "interval_minutes": 5},
        }
    }

    added = register_default_jobs(scheduler)

    assert added == ["job_daily_viral_check"]
    assert "interval" in scheduler.get_job("job_daily_viral_check")["trigger"]


def test_pause_resume_and_remove(scheduler):
    register_default_jobs(scheduler)
    scheduler.start()
    try:
        assert scheduler.pause_job("job_weekly_pipeline") is True
        assert scheduler.get_job("job_weekly_pipeline")["next_run"] is None
        assert scheduler.resume_job("job_weekly_pipeline") is True
        assert scheduler.get_job("job_weekly_pipeline")["next_run"] is not None
        assert scheduler.remove_job("job_weekly_pipeline") is True
        assert scheduler.remove_job("job_weekly_pipeline") is False
        assert scheduler.run_job_now("job_missing") is False
    finally:
        scheduler.shutdown(wait=False)

    assert scheduler.is_running is False


def test_job_functions_are_registered():
    assert JOB_FUNCTIONS == {
        "weekly_pipeline": run_weekly_job,
        "daily_viral_check": run_daily_viral_check,
    }


def test_job_failures_are_reported(monkeypatch):
    import services.trend_pipeline as trend_pipeline

    def broken(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(trend_pipeline.TrendPipeline, "run_weekly", broken)
    monkeypatch.setattr(trend_pipeline, "send_viral_notifications", broken)

    assert run_weekly_job()["status"] == "failed"
    assert run_daily_viral_check() == {
        "job": "daily_viral_check",
        "status": "failed",
        "error": "database unavailable",
    }


def test_singleton(monkeypatch):
    monkeypatch.setattr(scheduler_module, "_scheduler", None)
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")

    assert scheduler_module.get_scheduler() is scheduler_module.get_scheduler()
