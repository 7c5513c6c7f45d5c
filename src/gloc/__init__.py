"""Run one shell command concurrently across many directories."""

__version__ = "0.3.0"
