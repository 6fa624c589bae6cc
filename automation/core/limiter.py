"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. The write limit is read from settings
when a request is checked, not at import.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from automation.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def _write_limit() -> str:
    return get_settings().rate_limit_writes


limit_writes = limiter.limit(_write_limit)
