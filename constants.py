import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3001))

DEFAULT_ROOM_ID = os.getenv("DEFAULT_ROOM_ID", "default")
AVATAR_URL_TEMPLATE = os.getenv("AVATAR_URL_TEMPLATE", "https://api.dicebear.com/7.x/personas/svg?seed={seed}")

# Frames queued per connection before new ones are dropped
OUTBOUND_QUEUE_SIZE = int(os.getenv("OUTBOUND_QUEUE_SIZE", 256))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
