import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./event_control.db")
    DB_CREATE_TABLES = bool(data.get("DB_CREATE_TABLES", 1))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENVIRONMENT = data.get("ENVIRONMENT", "development")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    REQUEST_TIMEOUT_SECONDS = float(data.get("REQUEST_TIMEOUT_SECONDS", 30))

    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_EXPIRE_MINUTES = int(data.get("JWT_EXPIRE_MINUTES", 1440))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    AUTH_RATE_LIMIT_MAX_ATTEMPTS = int(data.get("AUTH_RATE_LIMIT_MAX_ATTEMPTS", 5))
    AUTH_RATE_LIMIT_WINDOW_SECONDS = int(data.get("AUTH_RATE_LIMIT_WINDOW_SECONDS", 900))
    AUTH_RATE_LIMIT_BLOCK_SECONDS = int(data.get("AUTH_RATE_LIMIT_BLOCK_SECONDS", 3600))

    EVENT_HISTORY_RETENTION_DAYS = int(data.get("EVENT_HISTORY_RETENTION_DAYS", 365))
    HISTORY_RETENTION_DAYS = int(data.get("HISTORY_RETENTION_DAYS", 90))
    NOTIFICATION_RETENTION_DAYS = int(data.get("NOTIFICATION_RETENTION_DAYS", 30))

    EVENT_BUS_HANDLER_TIMEOUT_SECONDS = float(
        data.get("EVENT_BUS_HANDLER_TIMEOUT_SECONDS", 30)
    )
    EVENT_BUS_QUEUE_SIZE = int(data.get("EVENT_BUS_QUEUE_SIZE", 1000))
    WS_MAX_MESSAGE_BYTES = int(data.get("WS_MAX_MESSAGE_BYTES", 65536))

    # empty SMTP_HOST: mail is logged, not delivered
    SMTP_HOST = data.get("SMTP_HOST", "")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USER = data.get("SMTP_USER")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD")
    SMTP_FROM = data.get("SMTP_FROM", "noreply@event-control.local")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
