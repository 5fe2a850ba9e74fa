import os
from typing import Callable
from ast import literal_eval

from dotenv import load_dotenv

ROOT_DIR = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


def get_abs_path(file_path: str):
    """append ROOT_DIR for relative path"""
    # Already absolute path
    if file_path.startswith("/"):
        return file_path
    else:
        return os.path.join(ROOT_DIR, file_path)


def mh_getenv(env_var: str, default_factory: Callable = None):
    """
    Get env value, convert into Python object
    Args:
        env_var (str): env var, example: EMAIL_LOG_MAX_ROWS
        default_factory: returns value if this env var is not set.

    """
    value = os.getenv(env_var)
    if value is None:
        return default_factory()

    return literal_eval(value)


config_file = os.environ.get("CONFIG")
if config_file:
    config_file = get_abs_path(config_file)
    print("load config file", config_file)
    load_dotenv(get_abs_path(config_file))
else:
    load_dotenv()

COLOR_LOG = "COLOR_LOG" in os.environ

# The only domain this instance routes for
EMAIL_DOMAIN = os.environ["EMAIL_DOMAIN"].strip().lower()
print(">>> EMAIL_DOMAIN:", EMAIL_DOMAIN)

# Database
DB_URI = os.environ["DB_URI"]
DB_CONN_NAME = os.environ.get("DB_CONN_NAME", "mailhop")

# Only keep the most recent rows in email_log
EMAIL_LOG_MAX_ROWS = mh_getenv("EMAIL_LOG_MAX_ROWS", lambda: 10000)

# errors longer than this are truncated before being stored in email_log
EMAIL_LOG_MAX_ERROR_LENGTH = 2000

# Admin API. If not set, the API doesn't require authentication (dev mode)
MAILHOP_API_KEY = os.environ.get("MAILHOP_API_KEY")

# Upstream MTA used to relay forwarded emails
NOT_SEND_EMAIL = "NOT_SEND_EMAIL" in os.environ
POSTFIX_SERVER = os.environ.get("POSTFIX_SERVER", "240.0.0.1")
POSTFIX_PORT = int(os.environ.get("POSTFIX_PORT", 25))
POSTFIX_SUBMISSION_TLS = "POSTFIX_SUBMISSION_TLS" in os.environ
POSTFIX_TIMEOUT = int(os.environ.get("POSTFIX_TIMEOUT", 10))

# Sentry
ENABLE_SENTRY = "ENABLE_SENTRY" in os.environ
SENTRY_DSN = os.environ.get("SENTRY_DSN")

# Flask
FLASK_SECRET = os.environ.get("FLASK_SECRET", "secret")
