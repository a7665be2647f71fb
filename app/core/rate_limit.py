from slowapi import Limiter
from slowapi.util import get_remote_address
from app.config.settings import settings

# Callable so the limit follows settings.rate_limit at request time
limiter = Limiter(key_func=get_remote_address, default_limits=[lambda: settings.rate_limit])
