from functools import wraps
from typing import Tuple, Optional

from flask import Blueprint, request, jsonify

from app import config

api_bp = Blueprint(name="api", import_name=__name__)


def authorize_request() -> Optional[Tuple[str, int]]:
    """No auth required when MAILHOP_API_KEY isn't set (dev mode)"""
    if not config.MAILHOP_API_KEY:
        return None

    auth_header = request.headers.get("Authorization", "")
    if auth_header != f"Bearer {config.MAILHOP_API_KEY}":
        return jsonify(error="Unauthorized"), 401

    return None


def require_api_auth(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        error_return = authorize_request()
        if error_return:
            return error_return
        return f(*args, **kwargs)

    return decorated
