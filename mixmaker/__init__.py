"""AI playlist generator backed by Spotify and the Anthropic API."""

__version__ = "0.1.0"
