# config/settings/test.py
from .base import *  # noqa

# PostgreSQL when DB_ENGINE points at it; RLS/session tests skip elsewhere.
_engine = os.getenv("DB_ENGINE", "django.db.backends.sqlite3")  # noqa: F405

if _engine == "django.db.backends.sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": _engine,
            "NAME": os.getenv("DB_NAME", ":memory:"),  # noqa: F405
            "ATOMIC_REQUESTS": True,
        }
    }
else:
    DATABASES["default"]["ENGINE"] = _engine  # noqa: F405

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
LOGGING["loggers"]["ho_core"]["level"] = "DEBUG"  # noqa: F405
