"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "60/minute"
UPLOAD_LIMIT = "10/minute"
SEARCH_LIMIT = "120/minute"

limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_upload = limiter.limit(UPLOAD_LIMIT)
limit_search = limiter.limit(SEARCH_LIMIT)
