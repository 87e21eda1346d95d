import os

from config.base import *  # noqa: F401,F403
from config.base import _flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_FILE = os.getenv("LOG_FILE", "logs/ams_portal.log")

AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
