from slowapi import Limiter
from slowapi.util import get_remote_address

# Process-wide: the route decorators bind to this instance, so every app built
# in the process shares its counters and its ``enabled`` switch. The most
# recent ``create_app`` call sets the switch.
limiter = Limiter(key_func=get_remote_address)

SENSITIVE_RATE_LIMIT = "5/minute"
SENSITIVE_HOURLY_RATE_LIMIT = "100/hour"
