"""Database engine and per-request sessions."""

from .session import AsyncSessionLocal, engine, get_db

__all__ = ["get_db", "engine", "AsyncSessionLocal"]
