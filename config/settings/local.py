# config/settings/local.py
from .base import *  # noqa

DEBUG = True
LOG_LEVEL = "DEBUG"
LOGGING["loggers"]["ho_core"]["level"] = LOG_LEVEL  # noqa: F405
