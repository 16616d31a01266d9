# config/settings/test.py
from .base import *  # noqa

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        "ATOMIC_REQUESTS": False,
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# let pytest's caplog see domain logs
LOGGING["loggers"]["cg_core"].update({"handlers": [], "level": "DEBUG", "propagate": True})  # noqa: F405
