"""Settings for the pytest suite."""
from .base import *  # noqa: F401,F403
from .base import ADAPTERS_CONFIG

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# The simulated gateway always approves unless a test says otherwise.
ADAPTERS_CONFIG = {
    **ADAPTERS_CONFIG,
    "payments.fake": {"success_rate": 1.0},
}

NOTIFICATIONS = {"email": "fake_email", "sms": "fake_sms"}
