"""APScheduler integration for the weekly trend run and the daily viral check.

Jobs are persisted with SQLAlchemyJobStore. ``max_instances=1`` keeps the
scheduler from overlapping a job with itself; it does not guard against a
manual run started from the API or CLI at the same time.
"""

import logging
import os
from datetime import datetime
from typing import Callable

import yaml
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# APScheduler counts day_of_week from Monday, so Sunday is spelled out
DEFAULT_JOBS = {
    "weekly_pipeline": {"enabled": True, "cron": "0 0 * * sun"},
    "daily_viral_check": {"enabled": True, "cron": "0 6 * * *"},
}


class TrendScheduler:
    """Manages scheduled pipeline jobs.

    Uses APScheduler with SQLite persistence for job state.
    """

    def __init__(
        self,
        db_url: str | None = None,
        config_path: str = "configs/scheduler.yaml",
        persist: bool = True,
    ):
        """Initialize scheduler.

        Args:
            db_url: Application database URL; jobs go to a sibling SQLite file
            config_path: Path to scheduler configuration
            persist: Store jobs in SQLite (in memory if False)
        """
        self.config = self._load_config(config_path)
        self._job_functions: dict[str, Callable] = {}
        self.scheduler = None
        self._running = False

        if not os.getenv("SCHEDULER_ENABLED", "true").lower() == "true":
            logger.info("Scheduler disabled via SCHEDULER_ENABLED env var")
            return

        db_url = db_url or os.getenv("DATABASE_URL", "sqlite:///./data/promptpulse.db")
        # Keep APScheduler tables out of the application database
        jobs_db = db_url.replace("promptpulse.db", "scheduler_jobs.db")

        try:
            jobstores = {"default": SQLAlchemyJobStore(url=jobs_db) if persist else MemoryJobStore()}

            executors = {
                "default": ThreadPoolExecutor(
                    max_workers=self.config.get("scheduler", {}).get("max_workers", 2)
                ),
            }

            job_defaults = {
                "coalesce": True,  # Combine missed runs
                "max_instances": 1,  # Only one instance per job
                "misfire_grace_time": 3600,  # 1 hour grace period
            }

            self.scheduler = BackgroundScheduler(
                jobstores=jobstores,
                executors=executors,
                job_defaults=job_defaults,
                timezone=self.config.get("scheduler", {}).get("timezone", "UTC"),
            )

            logger.info("Scheduler initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize scheduler: {e}")
            self.scheduler = None

    def _load_config(self, config_path: str) -> dict:
        """Load scheduler configuration."""
        if os.path.exists(config_path):
            with open(config_path, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    @property
    def is_available(self) -> bool:
        """Check if scheduler is available."""
        return self.scheduler is not None

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running and self.scheduler is not None

    @property
    def registered_jobs(self) -> list[str]:
        return list(self._job_functions)

    def add_job(
        self,
        name: str,
        func: Callable,
        interval_minutes: int | None = None,
        cron_expression: str | None = None,
        enabled: bool = True,
        **kwargs,
    ) -> str | None:
        """Add a scheduled job.

        Args:
            name: Job name
            func: Module-level function to call
            interval_minutes: Run interval (used if no cron)
            cron_expression: Crontab expression
            enabled: Whether job is enabled
            **kwargs: Arguments to pass to function

        Returns:
            Job ID or None
        """
        if not self.is_available or not enabled:
            return None

        job_id = f"job_{name}"
        self._job_functions[name] = func

        try:
            if cron_expression:
                trigger = CronTrigger.from_crontab(cron_expression)
            else:
                trigger = IntervalTrigger(minutes=interval_minutes or 60)

            self.scheduler.add_job(
                func,
                trigger=trigger,
                kwargs=kwargs,
                id=job_id,
                name=name.replace("_", " ").title(),
                replace_existing=True,
            )

            logger.info(f"Added scheduled job: {job_id}")
            return job_id

        except Exception as e:
            logger.error(f"Failed to add job {job_id}: {e}")
            return None

    def _job_action(self, action: str, job_id: str) -> bool:
        """Apply remove/pause/resume to a job; False if it does not exist."""
        if not self.is_available:
            return False

        try:
            getattr(self.scheduler, f"{action}_job")(job_id)
        except JobLookupError:
            logger.warning(f"Cannot {action} unknown job: {job_id}")
            return False

        logger.info(f"Job {job_id}: {action}")
        return True

    def remove_job(self, job_id: str) -> bool:
        return self._job_action("remove", job_id)

    def pause_job(self, job_id: str) -> bool:
        return self._job_action("pause", job_id)

    def resume_job(self, job_id: str) -> bool:
        return self._job_action("resume", job_id)

    def run_job_now(self, job_id: str) -> bool:
        """Move a job's next run to now."""
        if not self.is_available:
            return False

        job = self.scheduler.get_job(job_id)
        if job is None:
            return False

        job.modify(next_run_time=datetime.now(job.trigger.timezone))
        logger.info(f"Triggered job: {job_id}")
        return True

    @staticmethod
    def _job_info(job) -> dict:
        next_run = getattr(job, "next_run_time", None)
        return {
            "id": job.id,
            "name": job.name,
            "next_run": next_run.isoformat() if next_run else None,
            "trigger": str(job.trigger),
            "pending": job.pending,
        }

    def get_jobs(self) -> list[dict]:
        """Get all scheduled jobs.

        Returns:
            List of job info dicts
        """
        if not self.is_available:
            return []
        return [self._job_info(job) for job in self.scheduler.get_jobs()]

    def get_job(self, job_id: str) -> dict | None:
        """Get a specific job by ID."""
        if not self.is_available:
            return None

        job = self.scheduler.get_job(job_id)
        return self._job_info(job) if job else None

    def start(self) -> bool:
        """Start the scheduler.

        Returns:
            True if started
        """
        if not self.is_available:
            return False

        if self._running:
            logger.warning("Scheduler already running")
            return True

        try:
            self.scheduler.start()
            self._running = True
            logger.info("Scheduler started")
            return True
        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            return False

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the scheduler.

        Args:
            wait: Wait for running jobs to complete
        """
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=wait)
            self._running = False
            logger.info("Scheduler stopped")


# --------------------------------------------------------------------------
# Standalone job functions (module-level so SQLAlchemyJobStore can persist them)
# --------------------------------------------------------------------------

def run_weekly_job() -> dict:
    """Weekly run: discover trends, publish approved clusters, notify."""
    from services.trend_pipeline import TrendPipeline

    logger.info("Starting scheduled weekly job...")
    try:
        return TrendPipeline().run_weekly()
    except Exception as e:
        logger.error(f"Weekly job failed: {e}")
        return {"job": "weekly_pipeline", "status": "failed", "error": str(e)}


def run_daily_viral_check() -> dict:
    """Daily check for approved viral clusters still awaiting a notification."""
    from services.trend_pipeline import send_viral_notifications

    logger.info("Running daily viral check...")
    try:
        result = send_viral_notifications()
        logger.info(f"Sent {result['sent']} viral notifications")
        return result
    except Exception as e:
        logger.error(f"Daily viral check failed: {e}")
        return {"job": "daily_viral_check", "status": "failed", "error": str(e)}


JOB_FUNCTIONS = {
    "weekly_pipeline": run_weekly_job,
    "daily_viral_check": run_daily_viral_check,
}


# Singleton instance
_scheduler: TrendScheduler | None = None


def get_scheduler() -> TrendScheduler:
    """Get the singleton scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = TrendScheduler()
    return _scheduler


def register_default_jobs(scheduler: TrendScheduler) -> list[str]:
    """Register the jobs listed in config (or the defaults).

    Returns:
        IDs of jobs added
    """
    jobs_config = scheduler.config.get("jobs") or DEFAULT_JOBS
    added = []

    for name, job_config in jobs_config.items():
        func = JOB_FUNCTIONS.get(name)
        if func is None:
            logger.warning(f"Unknown job in config: {name}")
            continue

        job_id = scheduler.add_job(
            name=name,
            func=func,
            interval_minutes=job_config.get("interval_minutes"),
            cron_expression=job_config.get("cron"),
            enabled=job_config.get("enabled", True),
        )
        if job_id:
            added.append(job_id)

    return added


def init_scheduler(auto_register: bool = True) -> TrendScheduler:
    """Initialize and configure the scheduler.

    Args:
        auto_register: Register jobs from config

    Returns:
        Configured scheduler instance
    """
    scheduler = get_scheduler()

    if not scheduler.is_available:
        logger.warning("Scheduler not available, skipping initialization")
        return scheduler

    if auto_register:
        register_default_jobs(scheduler)

    return scheduler
