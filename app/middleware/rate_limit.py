"""
Shared slowapi limiter.

Routes decorate expensive endpoints with @limiter.limit(...) and must take a
`request: Request` argument. main.py registers the same instance on
app.state.limiter. Set RATE_LIMIT_ENABLED=false to switch limits off (tests).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings

# Per-IP limits for AI-backed endpoints
AI_LIMIT = "20/minute"
UPLOAD_LIMIT = "5/minute"
AUTH_LIMIT = "10/minute"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_settings().rate_limit_enabled,
)
