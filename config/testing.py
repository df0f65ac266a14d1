from .config import *  # noqa: F401,F403
from .config import env_flag

SECRET_KEY = "test-secret"

STORE_BACKEND = "memory"

DEBUG = False
TESTING = True

DEMO_MODE = True

AUTO_INIT_DB = False
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

SMTP_CONFIG = None
CALENDAR_WEBHOOK_URL = None
