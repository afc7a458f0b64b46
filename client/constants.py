"""
Shared constants used across all client modules.

Centralises magic numbers, default headers, and tunables so they live in
exactly one place.
"""

# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

KIB = 1024
MIB = 1024 * 1024

# ---------------------------------------------------------------------------
# Target server
# ---------------------------------------------------------------------------

DEFAULT_SERVER_URL = "http://localhost:8080"

PING_PATH = "/ping"
DOWNLOAD_PATH = "/download"
UPLOAD_PATH = "/upload"

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = "speedtest-cli"

# Compression would hide the real number of bytes on the wire.
COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Encoding": "identity",
}

# ---------------------------------------------------------------------------
# Stream limits
# ---------------------------------------------------------------------------

MIN_STREAMS = 1
MAX_STREAMS = 32
DEFAULT_STREAMS = 4

# ---------------------------------------------------------------------------
# Transfer sizes
# ---------------------------------------------------------------------------

DEFAULT_TEST_SIZE = 100 * MIB
DEFAULT_CHUNK_SIZE = 64 * KIB

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

DEFAULT_PING_COUNT = 1
MIN_PING_COUNT = 1
MAX_PING_COUNT = 100

PROGRESS_INTERVAL = 0.1          # 100 ms between progress snapshots

CONNECT_TIMEOUT = 5.0            # seconds to establish a connection
DEFAULT_TIMEOUT = 30.0           # seconds of socket inactivity before failing
MIN_TIMEOUT = 1.0
MAX_TIMEOUT = 600.0
