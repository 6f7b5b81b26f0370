"""
Rate limiter configuration.

Every analysis costs an OpenAI call, so the analysis routes are limited per
client IP. Limits are configurable through the environment.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from ketometer.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

ANALYSIS_LIMIT = settings.ANALYSIS_RATE_LIMIT
DIAGNOSTICS_LIMIT = "30/minute"
ROOT_LIMIT = "60/minute"
