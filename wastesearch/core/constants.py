"""Core constants: search sentinels, upstream header names and cache key prefixes."""

# Placeholder for an absent filter value. Storage predicates treat it as match-all.
NOVALUE = "NOVALUE"

# Client criterion for a restricted caller with no authorized clients (matches nothing).
NOCLIENT = "NOCLIENT"

# Forest Client numbers are eight digits, zero padded.
CLIENT_NUMBER_LENGTH = 8
PLACEHOLDER_CLIENT_NUMBER = "0" * CLIENT_NUMBER_LENGTH

# Forest Client API headers
X_TOTAL_COUNT = "X-Total-Count"
X_API_KEY = "X-API-KEY"

# Fallback description for a client location without a name.
NO_LOCATION_NAME = "No name provided"

# Suffix stripped from district names on display.
DISTRICT_NAME_SUFFIX = "Natural Resource District"

# Cache key prefixes
CACHE_PREFIX_CLIENT = "client"
CACHE_PREFIX_CLIENT_LOCATIONS = "client_locations"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"
