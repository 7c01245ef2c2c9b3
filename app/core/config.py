import os
from dotenv import load_dotenv

load_dotenv()

# Application Constants
SERVICE_NAME = "File Upload Server"
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", 3000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Write a gzip copy ("<name>.gz") next to every stored upload
COMPRESS_UPLOADS = os.getenv("COMPRESS_UPLOADS", "false").lower() == "true"

# Number of lock stripes in the task registry (1 = single global lock)
REGISTRY_SHARDS = int(os.getenv("REGISTRY_SHARDS", 16))

# The upload directory is created by the app lifespan, not at import time,
# so that a failure to create it stops the server from starting.
