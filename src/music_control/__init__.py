"""Music Control - per-stream playback queue and track selection service."""

__version__ = "1.0.0"
