"""Account authentication service for the Taiko game-profile web UI."""

__version__ = "0.1.0"
