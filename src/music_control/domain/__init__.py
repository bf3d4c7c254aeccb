"""Domain layer: catalog and stream playback."""
