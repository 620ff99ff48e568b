"""Qt models for the combined chat feed."""

from .feed_model import FeedListModel

__all__ = ["FeedListModel"]
