"""Infrastructure: SQLAlchemy and in-memory implementations of application interfaces."""
