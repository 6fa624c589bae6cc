"""Persistence: SQLAlchemy engine, ORM models, and repositories."""
