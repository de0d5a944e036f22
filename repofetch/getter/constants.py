"""Constants for the HTTP getter.

Centralizes defaults shared by options, settings and the client.
"""

# Request timeout applied when none is configured (seconds)
DEFAULT_TIMEOUT_SECONDS = 120.0

# Maximum redirect hops followed before giving up
MAX_REDIRECTS = 10

# Chunk size for streaming body reads
DEFAULT_CHUNK_SIZE = 8192

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Artifacts are returned exactly as served, so never negotiate compression
ACCEPT_ENCODING_IDENTITY = "identity"
