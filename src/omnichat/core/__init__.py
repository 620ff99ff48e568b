"""Core models and settings for the combined chat feed."""

from .models import CHAT_SOURCES, DisplayMode, FeedRecord, RecordSource
from .settings import FeedSettings

__all__ = [
    "CHAT_SOURCES",
    "DisplayMode",
    "FeedRecord",
    "FeedSettings",
    "RecordSource",
]
