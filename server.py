import argparse

from flask import Flask, jsonify, request
from sentry_sdk.integrations.flask import FlaskIntegration
from werkzeug.exceptions import HTTPException

from app.api.base import api_bp
from app.config import ENABLE_SENTRY, FLASK_SECRET
from app.db import Session
from app.log import LOG
from app.sentry_utils import init_sentry

# register the api views
from app import api  # noqa: F401

if ENABLE_SENTRY:
    init_sentry(integrations=[FlaskIntegration()])


def create_app() -> Flask:
    app = Flask(__name__)
    app.url_map.strict_slashes = False
    app.secret_key = FLASK_SECRET

    app.register_blueprint(api_bp)

    setup_request_logging(app)
    setup_error_page(app)

    @app.teardown_appcontext
    def shutdown_session(response_or_exc):
        Session.remove()

    return app


def setup_request_logging(app):
    @app.after_request
    def after_request(res):
        LOG.debug(
            "%s %s %s %s %s",
            request.remote_addr,
            request.method,
            request.path,
            request.args,
            res.status_code,
        )
        return res


def setup_error_page(app):
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(error=e.description), e.code

    @app.errorhandler(Exception)
    def error_handler(e):
        LOG.exception(e)
        Session.rollback()
        return jsonify(error="Internal error while processing request"), 500


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("-p", "--port", help="HTTP port", type=int, default=7777)
    args = parser.parse_args()

    app = create_app()
    app.run(debug=False, port=args.port, host="0.0.0.0")
