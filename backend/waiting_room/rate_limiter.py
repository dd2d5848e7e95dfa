from slowapi import Limiter
from slowapi.util import get_remote_address

from waiting_room.core.config import settings

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])
