from flask import jsonify, request
from flask_cors import cross_origin

from app import alias_utils
from app.alias_utils import NOT_SET
from app.api.base import api_bp, require_api_auth
from app.api.serializer import serialize_alias
from app.errors import AliasAlreadyExistsError, ErrAddressInvalid
from app.models import Alias
from app.utils import sanitize_email


@api_bp.route("/aliases", methods=["GET"])
@cross_origin()
@require_api_auth
def get_aliases():
    """
    Get all aliases, ordered by address
    Output: list of alias:
        - id
        - address
        - forward_to
        - notes
        - created_at
        - allow_plus
    """
    aliases = Alias.order_by(Alias.address).all()
    return jsonify([serialize_alias(alias) for alias in aliases]), 200


@api_bp.route("/aliases/by-destination", methods=["GET"])
@cross_origin()
@require_api_auth
def get_aliases_by_destination():
    """
    Get aliases that forward to an address
    Input:
        email: in query
    """
    forward_to = sanitize_email(request.args.get("email"))
    if not forward_to:
        return jsonify(error="email parameter required"), 400

    aliases = alias_utils.get_aliases_by_destination(forward_to)
    return jsonify([serialize_alias(alias) for alias in aliases]), 200


@api_bp.route("/aliases/<path:address>", methods=["GET"])
@cross_origin()
@require_api_auth
def get_alias(address):
    alias = Alias.get_by_address(address)
    if not alias:
        return jsonify(error="Alias not found"), 404

    return jsonify(serialize_alias(alias)), 200


@api_bp.route("/aliases", methods=["POST"])
@cross_origin()
@require_api_auth
def create_alias():
    """
    Create a new alias
    Input:
        address, forward_to: in body
        notes, allow_plus: in body, optional. allow_plus is enabled by default
    Output:
        success, alias
    """
    data = request.get_json(silent=True)
    if data is None:
        return jsonify(error="Invalid JSON body"), 400

    address = data.get("address")
    forward_to = data.get("forward_to")
    if not address or not forward_to:
        return jsonify(error="address and forward_to are required"), 400

    notes = data.get("notes")
    if not isinstance(notes, str):
        notes = None

    try:
        alias = alias_utils.create_alias(
            address, forward_to, notes=notes, allow_plus=data.get("allow_plus", True)
        )
    except ErrAddressInvalid:
        return jsonify(error="Invalid email address"), 400
    except AliasAlreadyExistsError as e:
        return jsonify(error=e.error_for_user()), 409

    return jsonify(success=True, alias=serialize_alias(alias)), 201


@api_bp.route("/aliases/<path:address>", methods=["PATCH"])
@cross_origin()
@require_api_auth
def update_alias(address):
    """
    Update an alias
    Input:
        forward_to, notes, allow_plus: in body, at least one of them
    Output:
        success, alias
    """
    data = request.get_json(silent=True)
    if data is None:
        return jsonify(error="Invalid JSON body"), 400

    changes = {
        field: data[field]
        for field in ("forward_to", "notes", "allow_plus")
        if field in data
    }
    if not changes:
        return (
            jsonify(
                error="No updatable fields provided (forward_to, notes, allow_plus)"
            ),
            400,
        )

    alias = Alias.get_by_address(address)
    if not alias:
        return jsonify(error="Alias not found"), 404

    try:
        alias_utils.update_alias(
            alias,
            forward_to=changes.get("forward_to", NOT_SET),
            notes=changes.get("notes", NOT_SET),
            allow_plus=changes.get("allow_plus", NOT_SET),
        )
    except ErrAddressInvalid:
        return jsonify(error="forward_to must be a valid email"), 400

    return jsonify(success=True, alias=serialize_alias(alias)), 200


@api_bp.route("/aliases/<path:address>", methods=["DELETE"])
@cross_origin()
@require_api_auth
def delete_alias(address):
    alias = Alias.get_by_address(address)
    if not alias:
        return jsonify(error="Alias not found"), 404

    deleted_address = alias.address
    alias_utils.delete_alias(alias)
    return jsonify(success=True, deleted=deleted_address), 200
