from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

# Tests inject in-memory repositories; never touch a database on startup
AUTO_INIT_DB = False
AUTO_SEED_DB = False
