"""Challenge indexer: projects fitness-challenge contract calls into local state."""

__version__ = "0.1.0"
