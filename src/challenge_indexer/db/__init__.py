"""Database configuration and utilities."""

from .session import Base, get_db, get_engine, get_session_factory

__all__ = ["Base", "get_db", "get_engine", "get_session_factory"]
