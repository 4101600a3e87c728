"""Activity logging package."""

from src.activity.logger import ActivityLogger

__all__ = ["ActivityLogger"]
