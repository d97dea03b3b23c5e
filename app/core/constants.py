"""Core constants: storage layout, quota counter keys, shared literal values."""

# Metadata sidecar suffix: <public_key>.meta next to <public_key>
METADATA_SUFFIX = ".meta"

# Quota counter key prefixes (direction), joined as <direction>:<client_id>:<YYYY-MM-DD>
QUOTA_DIRECTION_UPLOAD = "upload"
QUOTA_DIRECTION_DOWNLOAD = "download"
QUOTA_KEY_SEP = ":"

# Counter TTL set on the first increment of the day
QUOTA_COUNTER_TTL_SECONDS = 86400

# Payload stream chunk size
STREAM_CHUNK_SIZE = 64 * 1024  # 64KB

PUBLIC_KEY_PATTERN = r"^[a-f0-9]{32}$"
PRIVATE_KEY_PATTERN = r"^[a-f0-9]{64}$"
