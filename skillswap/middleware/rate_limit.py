"""
Shared slowapi limiter.

Routes decorate with @limiter.limit("N/period") and must accept a
`request: Request` argument. RATE_LIMIT_ENABLED=false turns every limit off.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from skillswap.config import get_settings

# Per-IP limits for the expensive or abuse-prone endpoints
SIGNUP_LIMIT = "5/hour"
LOGIN_LIMIT = "20/minute"
GENERATE_LIMIT = "10/hour"

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)
