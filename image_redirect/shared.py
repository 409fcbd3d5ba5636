"""Constants and environment settings shared by the redirect API and its entrypoint.

Single source of truth for the upstream endpoint, listen address, session
cookie, and the static error bodies clients see, so they can be changed in one
place.
"""

import os
import secrets

# Upstream image-metadata API: GET {UPSTREAM_BASE_URL}/{device}/?json
UPSTREAM_BASE_URL = os.environ.get("IMAGE_REDIRECT_UPSTREAM_URL", "https://t.alcy.cc").rstrip("/")
UPSTREAM_TIMEOUT_SEC = float(os.environ.get("IMAGE_REDIRECT_UPSTREAM_TIMEOUT", "10.0"))
# Embedded status code the upstream puts in its JSON body on success.
UPSTREAM_OK_CODE = 200

# Listen address.
HOST = os.environ.get("IMAGE_REDIRECT_HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", 45123))

# Cookie signing key. Random per process unless pinned, so sessions do not survive restarts.
SESSION_SECRET = os.environ.get("IMAGE_REDIRECT_SESSION_SECRET") or secrets.token_hex(32)
SESSION_COOKIE = "session"
SESSION_ID_KEY = "session_id"

# Query placeholder used when a request carries no parameters at all.
CANONICAL_QUERY = "0"

# Bounds of a valid identifier (signed 32-bit).
ID_MIN = -(2**31)
ID_MAX = 2**31 - 1

# Response bodies. "Invail" is kept verbatim; existing clients match on it.
MSG_INVALID_ID = "Invalid id: not a number"
MSG_UPSTREAM_LOGICAL = "Invail response code from external server"
MSG_UPSTREAM_DECODE = "Failed to parse response from external server"
MSG_UPSTREAM_TRANSPORT = "Failed to send request to external server"
