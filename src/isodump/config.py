import os

# Traversal
MAX_DEPTH = int(os.getenv("MAX_DEPTH", "64"))

# Service
MAX_INSPECT_SIZE = int(os.getenv("MAX_INSPECT_SIZE", str(64 * 1024 * 1024)))

VERSION = "1.0.0"
