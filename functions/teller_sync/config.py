import os

DEFAULT_PORT = 3000
DEFAULT_DATA_DIR = "/data"
DEFAULT_ADMIN_USER = "admin"
DEFAULT_ADMIN_PASS = "password"
DEFAULT_TELLER_API_HOST = "api.teller.io"
DEFAULT_TELLER_TIMEOUT_SECONDS = 30.0


def _is_truthy(v: str | None) -> bool:
    return (v or "").strip().lower() in ("1", "true", "yes", "on")


def get_port() -> int:
    return int(os.getenv("PORT") or DEFAULT_PORT)


def get_data_file() -> str:
    data_file = (os.getenv("DATA_FILE") or "").strip()
    if data_file:
        return data_file
    data_dir = (os.getenv("DATA_DIR") or "").strip() or DEFAULT_DATA_DIR
    return os.path.join(data_dir, "data.json")


def get_admin_credentials() -> tuple[str, str]:
    user = os.getenv("ADMIN_USER") or DEFAULT_ADMIN_USER
    password = os.getenv("ADMIN_PASS") or DEFAULT_ADMIN_PASS
    return user, password


def uses_default_admin_credentials() -> bool:
    return get_admin_credentials() == (DEFAULT_ADMIN_USER, DEFAULT_ADMIN_PASS)


def get_cors_origin() -> str:
    return (os.getenv("CORS_ALLOW_ORIGIN") or "").strip() or "*"


def get_teller_api_host() -> str:
    return (os.getenv("TELLER_API_HOST") or "").strip() or DEFAULT_TELLER_API_HOST


def get_teller_timeout() -> float:
    raw = (os.getenv("TELLER_TIMEOUT_SECONDS") or "").strip()
    if not raw:
        return DEFAULT_TELLER_TIMEOUT_SECONDS
    return float(raw)


def sentry_dsn() -> str | None:
    dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not dsn or _is_truthy(os.getenv("DISABLE_SENTRY")):
        return None
    return dsn
