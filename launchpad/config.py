import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    raw_db_url = os.getenv("DATABASE_URL")

    if raw_db_url:
        if raw_db_url.startswith("postgres://"):
            raw_db_url = raw_db_url.replace("postgres://", "postgresql://", 1)
        SQLALCHEMY_DATABASE_URI = raw_db_url
    else:
        SQLALCHEMY_DATABASE_URI = "sqlite:///launchpad.db"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-dev-secret")

    # Comma-separated list of admin emails, e.g. "owner@launchpad.gg,helper@launchpad.gg"
    ADMIN_EMAILS = os.getenv("ADMIN_EMAILS", "admin@launchpad.local")

    REGISTRATION_ENABLED = _env_flag("REGISTRATION_ENABLED", True)
    PASSWORD_SIGN_IN_ENABLED = _env_flag("PASSWORD_SIGN_IN_ENABLED", True)

    # Lock an account after this many wrong passwords in a row
    MAX_FAILED_LOGINS = int(os.getenv("MAX_FAILED_LOGINS", "5"))
    LOCKOUT_MINUTES = int(os.getenv("LOCKOUT_MINUTES", "15"))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # "omit" writes null into userLogins.password, "plain" keeps it as typed
    LOGIN_ACTIVITY_PASSWORD_POLICY = os.getenv("LOGIN_ACTIVITY_PASSWORD_POLICY", "omit")

    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Asia/Dhaka")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    RESEND_API_KEY = os.getenv("RESEND_API_KEY", None)
    RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", None)


# Appended to bare digit identifiers so they can sign in as an email credential
PHONE_IDENTIFIER_DOMAIN = "@phone.facebook.login"
