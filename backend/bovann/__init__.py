import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import Config
from bovann.extensions import db, jwt, limiter, migrate
from bovann.utils.errors import ApiError


def configure_logging(app):
    log_level = getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(logging.Formatter(app.config["LOG_FORMAT"]))

    app.logger.setLevel(log_level)
    # Avoid duplicate entries when the factory runs more than once
    app.logger.handlers.clear()
    app.logger.addHandler(stream_handler)


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return jsonify({"success": False, "message": err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        if err.response is not None:
            return err.response
        return jsonify({"success": False, "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err):
        app.logger.exception("Unhandled error: %s", err)
        db.session.rollback()
        return jsonify({"success": False, "message": "Internal server error"}), 500


def register_jwt_callbacks():
    from bovann.models import TokenBlocklist

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        jti = jwt_payload["jti"]
        token = db.session.query(TokenBlocklist).filter_by(jti=jti).first()
        return token is not None

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"success": False, "message": "Access token missing"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"success": False, "message": "Invalid or expired token"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": "Invalid or expired token"}), 401

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": "Token has been revoked"}), 401


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    db.init_app(app)
    jwt.init_app(app)
    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    limiter.init_app(app)
    migrate.init_app(app, db)

    from bovann.routes import register_routes
    register_routes(app)
    register_error_handlers(app)
    register_jwt_callbacks()

    with app.app_context():
        from bovann.seed import ensure_roles
        db.create_all()
        ensure_roles()

    return app
