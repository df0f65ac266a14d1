"""Settings shared by every environment, read from the process environment."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


DB_CONFIG = {
    "host": os.environ.get("DB_HOST", "localhost"),
    "port": int(os.environ.get("DB_PORT", "3306")),
    "user": os.environ.get("DB_USER", "root"),
    "password": os.environ.get("DB_PASSWORD", ""),
    "database": os.environ.get("DB_NAME", "hr_backoffice"),
}

# mysql | memory
STORE_BACKEND = os.environ.get("STORE_BACKEND", "mysql").lower()

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# live | snapshot | either
APPROVER_POLICY = os.environ.get("APPROVER_POLICY", "live").lower()
ENFORCE_BLACKOUT_ON_SUBMIT = env_flag("ENFORCE_BLACKOUT_ON_SUBMIT")

# Header set by the SSO proxy with the signed-in user's email, if any.
AUTH_EMAIL_HEADER = os.environ.get("AUTH_EMAIL_HEADER") or None

SMTP_CONFIG = {
    "host": os.environ.get("SMTP_HOST", ""),
    "port": int(os.environ.get("SMTP_PORT", "587")),
    "username": os.environ.get("SMTP_USERNAME"),
    "password": os.environ.get("SMTP_PASSWORD"),
    "use_tls": env_flag("SMTP_USE_TLS", "1"),
    "use_ssl": env_flag("SMTP_USE_SSL", "0"),
    "mail_from": os.environ.get("MAIL_FROM", "hr-backoffice@localhost"),
}

CALENDAR_WEBHOOK_URL = os.environ.get("CALENDAR_WEBHOOK_URL") or None
