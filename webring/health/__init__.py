"""Health subsystem — site classifier, scheduler, summary."""

from .classifier import ClassifierPatterns, classify_site
from .scheduler import HealthScheduler
from .summary import build_summary, format_since
