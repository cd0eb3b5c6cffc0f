"""Data access helpers for projected state."""
