from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
JWT_SECRET_KEY = "test-jwt-secret"
JWT_EXPIRE_MINUTES = 60
DEFAULT_MEMBER_PASSWORD = "Welcome@123"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
