"""Core: config, rate limiting, exception handlers, and application lifespan."""

from automation.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
