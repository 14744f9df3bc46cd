"""vibe-browse: chat with an AI agent that drives your local Chrome browser."""

__version__ = "0.1.0"
