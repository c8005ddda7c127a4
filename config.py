import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DB_URL", "sqlite:///merch_store.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecret")
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))

    # Orders
    ORDER_DEFAULT_STATUS = os.getenv("ORDER_DEFAULT_STATUS", "Completed")
    # When disabled, a caller-supplied totalAmount is ignored and the total is
    # always recomputed from the line prices.
    ORDER_TRUST_CLIENT_TOTAL = _env_flag("ORDER_TRUST_CLIENT_TOTAL", "true")

    # Comma separated list, or "*" for any origin.
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", os.path.join(BASE_DIR, "logs"))
    LOG_TO_FILE = _env_flag("LOG_TO_FILE", "true")
