"""Fleet Service - fleet and logistics backend."""

__version__ = "1.0.0"
