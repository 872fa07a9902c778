"""Terminal playback components: renderer, player and shared playback state."""
