"""Rate limiter shared by main.py and the routers.

Lives in its own module so routers can decorate endpoints without importing
main.py.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
