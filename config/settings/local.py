from .base import *  # noqa: F403
from .base import LOGGING
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = True
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="q2Vd7dC0fbh8XwR4Yf4nJc1bGmOe9a3UkPzLxs6TiNvWy5HrQt0EoSgAjKlMuBpI",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#allowed-hosts
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"]  # noqa: S104

# CACHES
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#caches
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "",
    },
}

# LOGGING
# ------------------------------------------------------------------------------
# Show per-rule failures while developing.
LOGGING["loggers"] = {
    "ruleevaluator": {
        "level": "DEBUG",
        "handlers": ["console"],
        "propagate": False,
    },
}
