"""Q&A forum core service."""

__version__ = "0.1.0"
