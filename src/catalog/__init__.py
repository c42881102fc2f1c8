"""Character catalog with a cache-aside distributed cache."""

__version__ = "0.1.0"
