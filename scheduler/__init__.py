"""Scheduler module for PromptPulse."""

from scheduler.scheduler import TrendScheduler, get_scheduler, init_scheduler

__all__ = ["TrendScheduler", "get_scheduler", "init_scheduler"]
