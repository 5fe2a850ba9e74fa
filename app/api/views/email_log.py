from flask import jsonify, request
from flask_cors import cross_origin

from app.api.base import api_bp, require_api_auth
from app.api.serializer import serialize_email_log
from app.models import EmailLog

DEFAULT_LOG_LIMIT = 50
MAX_LOG_LIMIT = 500


@api_bp.route("/logs", methods=["GET"])
@cross_origin()
@require_api_auth
def get_email_logs():
    """
    Get the latest email logs, most recent first
    Input:
        limit: in query, default to 50, at most 500
    """
    try:
        limit = int(request.args.get("limit", DEFAULT_LOG_LIMIT))
    except (ValueError, TypeError):
        limit = DEFAULT_LOG_LIMIT

    if limit <= 0:
        limit = DEFAULT_LOG_LIMIT
    limit = min(limit, MAX_LOG_LIMIT)

    email_logs = (
        EmailLog.order_by(EmailLog.ts.desc(), EmailLog.id.desc()).limit(limit).all()
    )
    return jsonify([serialize_email_log(email_log) for email_log in email_logs]), 200
