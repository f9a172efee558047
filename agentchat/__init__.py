"""Multi-agent chat turn pipeline."""

__version__ = "0.1.0"
