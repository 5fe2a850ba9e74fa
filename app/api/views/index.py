from flask import jsonify
from flask_cors import cross_origin

from app.api.base import api_bp, require_api_auth


@api_bp.route("/", methods=["GET"])
@cross_origin()
@require_api_auth
def index():
    return jsonify(
        name="mailhop API",
        description="Manage Mailhop email aliases and inspect email routing logs.",
        auth={
            "type": "Bearer token",
            "env_var": "MAILHOP_API_KEY",
            "header_example": "Authorization: Bearer <MAILHOP_API_KEY>",
        },
        endpoints={
            "GET /aliases": "List all aliases (id, address, forward_to, notes, created_at, allow_plus)",
            "GET /aliases/:address": "Fetch a single alias by its full address",
            "GET /aliases/by-destination?email=…": "Find aliases pointing at a specific forward_to address",
            "POST /aliases": "Create alias {address, forward_to, notes?, allow_plus?}",
            "PATCH /aliases/:address": "Update fields (forward_to, notes, allow_plus)",
            "DELETE /aliases/:address": "Delete alias by address",
            "GET /logs?limit=50": "Fetch the most recent email_logs entries",
        },
    )
