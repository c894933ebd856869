"""
Domain constants used across services/routers.
"""

ALGORAND_ADDRESS_LENGTH = 58
MAX_NOTE_BYTES = 1000

# Pagination bounds for GET /transactions
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 200

# Suggested params cache (GET /params)
PARAMS_CACHE_TTL_SECONDS = 60
