"""Settings for the combined chat feed."""

from dataclasses import dataclass, field
from pathlib import Path

from appdirs import user_data_dir

from .models import DisplayMode

APP_NAME = "omnichat"
APP_AUTHOR = "omnichat"

# Combos need at least two identical single-emote messages
COMBO_MIN_LENGTH = 2


def get_data_dir() -> Path:
    """Get the data directory."""
    path = Path(user_data_dir(APP_NAME, APP_AUTHOR))
    path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass
class FeedSettings:
    """Resolved configuration for one chat session."""

    max_messages: int = 70  # Soft cap, applied while stuck to the bottom
    max_messages_scroll: int = 5000  # Hard cap, applied while scrolled up
    sort_mode: DisplayMode = DisplayMode.ARRIVAL
    mention_trigger: str = "@"
    max_suggestions: int = 20
    combo_min_length: int = COMBO_MIN_LENGTH
    render_debounce_ms: int = 16
    suggest_debounce_ms: int = 50
    highlight_terms: list[str] = field(default_factory=list)

    @property
    def soft_cap(self) -> int:
        """Soft cap never exceeds the hard cap."""
        return min(self.max_messages, self.max_messages_scroll)

    @property
    def hard_cap(self) -> int:
        return self.max_messages_scroll

    @staticmethod
    def _validate_int(value, default: int, min_val: int = 0, max_val: int | None = None) -> int:
        """Validate and constrain an integer value."""
        if not isinstance(value, int) or isinstance(value, bool):
            return default
        if value < min_val:
            return min_val
        if max_val is not None and value > max_val:
            return max_val
        return value

    @classmethod
    def from_dict(cls, data: dict) -> "FeedSettings":
        """Create FeedSettings from already-resolved values, with validation."""
        settings = cls()

        settings.max_messages_scroll = cls._validate_int(
            data.get("max_messages_scroll"), 5000, min_val=1, max_val=50000
        )
        settings.max_messages = cls._validate_int(
            data.get("max_messages"), 70, min_val=1, max_val=settings.max_messages_scroll
        )

        try:
            settings.sort_mode = DisplayMode(data.get("sort_mode", settings.sort_mode.value))
        except ValueError:
            settings.sort_mode = DisplayMode.ARRIVAL

        trigger = data.get("mention_trigger")
        if isinstance(trigger, str) and len(trigger) == 1 and not trigger.isspace():
            settings.mention_trigger = trigger

        settings.max_suggestions = cls._validate_int(
            data.get("max_suggestions"), 20, min_val=1, max_val=100
        )
        settings.combo_min_length = cls._validate_int(
            data.get("combo_min_length"), COMBO_MIN_LENGTH, min_val=2, max_val=100
        )
        settings.render_debounce_ms = cls._validate_int(
            data.get("render_debounce_ms"), 16, min_val=0, max_val=1000
        )
        settings.suggest_debounce_ms = cls._validate_int(
            data.get("suggest_debounce_ms"), 50, min_val=0, max_val=1000
        )

        terms = data.get("highlight_terms", [])
        if isinstance(terms, list):
            settings.highlight_terms = [t for t in terms if isinstance(t, str) and t.strip()]

        return settings

    def to_dict(self) -> dict:
        """Convert to a plain dictionary."""
        return {
            "max_messages": self.max_messages,
            "max_messages_scroll": self.max_messages_scroll,
            "sort_mode": self.sort_mode.value,
            "mention_trigger": self.mention_trigger,
            "max_suggestions": self.max_suggestions,
            "combo_min_length": self.combo_min_length,
            "render_debounce_ms": self.render_debounce_ms,
            "suggest_debounce_ms": self.suggest_debounce_ms,
            "highlight_terms": list(self.highlight_terms),
        }
