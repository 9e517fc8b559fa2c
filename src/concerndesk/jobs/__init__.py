"""Background jobs."""

from .monthly_reset import register_scheduler

__all__ = ["register_scheduler"]
