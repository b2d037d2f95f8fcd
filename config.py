import os
from dotenv import load_dotenv

load_dotenv()


def _int_list(raw):
    return [int(x) for x in raw.split(",") if x.strip()]


def _bool(raw):
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "decodex2026")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///decodex.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Seconds to wait on a locked database before giving up
    DB_TIMEOUT = float(os.getenv("DB_TIMEOUT", 5))

    # Optional engine options for better PostgreSQL behavior under concurrency
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 5))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 10))
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "connect_args": {"timeout": DB_TIMEOUT, "check_same_thread": False},
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_size": DB_POOL_SIZE,
            "max_overflow": DB_MAX_OVERFLOW,
            "pool_timeout": DB_TIMEOUT,
        }

    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Game policy
    COMPLETION_BONUSES = _int_list(os.getenv("COMPLETION_BONUSES", "500,300,200,100"))
    COMPLETION_BONUS_FLOOR = int(os.getenv("COMPLETION_BONUS_FLOOR", 0))
    DEFAULT_POWER_UPS = {
        "hint": int(os.getenv("DEFAULT_HINTS", 1)),
        "skip": int(os.getenv("DEFAULT_SKIPS", 1)),
        "brainBoost": int(os.getenv("DEFAULT_BRAIN_BOOSTS", 1)),
        "doublePoints": int(os.getenv("DEFAULT_DOUBLE_POINTS", 1)),
    }
    SKIP_CONSUMES_BRAIN_BOOST = _bool(os.getenv("SKIP_CONSUMES_BRAIN_BOOST", "false"))
    ANSWER_MATCH_THRESHOLD = float(os.getenv("ANSWER_MATCH_THRESHOLD", 1.0))
    TEAM_LOCK_TIMEOUT = float(os.getenv("TEAM_LOCK_TIMEOUT", 5))
    DEFAULT_CHOICE_POINTS = {"easy": 100, "hard": 200}


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ADMIN_PASSWORD = "admin"
    LOG_LEVEL = "WARNING"
    COMPLETION_BONUSES = [500, 300, 200, 100]
    COMPLETION_BONUS_FLOOR = 0
    DEFAULT_POWER_UPS = {"hint": 1, "skip": 1, "brainBoost": 1, "doublePoints": 1}
    SKIP_CONSUMES_BRAIN_BOOST = False
    ANSWER_MATCH_THRESHOLD = 1.0
    TEAM_LOCK_TIMEOUT = 1
