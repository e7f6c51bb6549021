"""Data access repositories."""

from .job_registry import JobRegistry

__all__ = ["JobRegistry"]
