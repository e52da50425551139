"""Photo duplicate checker: find duplicate photos by capture metadata."""

__version__ = "0.1.0"
