import os

API_URL = os.getenv("FINSYNC_API_URL", "http://localhost:5000/api")
API_TOKEN = os.getenv("FINSYNC_API_TOKEN")

CONNECT_TIMEOUT = int(os.getenv("FINSYNC_CONNECT_TIMEOUT", "10"))
READ_TIMEOUT = int(os.getenv("FINSYNC_READ_TIMEOUT", "30"))

MIRROR_PATH = os.getenv("FINSYNC_MIRROR_PATH", os.path.expanduser("~/.finsync/mirror.json"))

DEDUPE_NOTIFICATIONS = os.getenv("FINSYNC_DEDUPE_NOTIFICATIONS", "0").lower() in ("1", "true", "yes")
USE_MOCK_DATA = os.getenv("FINSYNC_USE_MOCK_DATA", "0").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("FINSYNC_LOG_LEVEL", "INFO")
CURRENCY_SYMBOL = os.getenv("FINSYNC_CURRENCY_SYMBOL", "£")
