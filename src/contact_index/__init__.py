"""In-memory contact index with email lookup and name prefix search."""

__version__ = "0.1.0"
