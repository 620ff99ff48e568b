"""Combined multi-platform chat feed."""

__version__ = "0.1.0"
