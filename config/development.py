import os

from config.config import *  # noqa: F401,F403
from config.config import env_flag

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed demo areas and users on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
