import os

_SECRET_GETTER = None

DEFAULT_API_BASE_URL = "http://localhost:8000"


def configure(secret_getter):
    global _SECRET_GETTER
    _SECRET_GETTER = secret_getter


def get_secret(path, default=None):
    if _SECRET_GETTER is None:
        return default
    return _SECRET_GETTER(path, default)


def api_base_url():
    return (
        get_secret(("app", "API_BASE_URL"))
        or get_secret(("API_BASE_URL",))
        or os.getenv("API_BASE_URL")
        or DEFAULT_API_BASE_URL
    ).rstrip("/")

