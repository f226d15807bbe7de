"""
API gateway: wires the database, auth and users blueprints into one app.
This is the local entrypoint for development:

    python -m eventos.gateway.server
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional, Tuple

from flask import Flask, Response, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from eventos.auth_service.errors import ApiError, format_error
from eventos.auth_service.repository import UserRepository
from eventos.auth_service.routes import auth_bp
from eventos.auth_service.utils import CredentialHasher, TokenIssuer
from eventos.database.db_connection import Database
from eventos.gateway.config import load_config
from eventos.users_service.routes import users_bp


def configure_logging(level: str) -> None:
    # Basic console logging during API requests
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(levelname)s] %(asctime)s - %(message)s",
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> Tuple[Response, int]:
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException) -> Tuple[Response, int]:
        return jsonify({"error": error.description, "name": error.name.replace(" ", "")}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception) -> Tuple[Response, int]:
        logging.exception("Unhandled error while processing request")
        return jsonify(format_error(error)), 500


def create_app(test_config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        test_config (dict, optional): Overrides applied on top of the
            environment configuration.

    Returns:
        Flask: The configured Flask application.

    Raises:
        RuntimeError: The token secrets are not configured.
    """
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    if test_config:
        app.config.update(test_config)

    configure_logging(app.config["LOG_LEVEL"])

    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()]
    CORS(app, resources={
        r"/*": {
            "origins": origins or "*",
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    # --- SERVICES ---
    tokens = TokenIssuer(
        app.config["ACCESS_TOKEN_SECRET"],
        app.config["REFRESH_TOKEN_SECRET"],
        access_ttl=timedelta(minutes=app.config["ACCESS_TOKEN_EXPIRES_MINUTES"]),
        refresh_ttl=timedelta(days=app.config["REFRESH_TOKEN_EXPIRES_DAYS"]),
    )
    database = Database(app.config["DATABASE_URL"])
    database.init_db()

    app.extensions["eventos"] = {
        "db": database,
        "users": UserRepository(database),
        "hasher": CredentialHasher(app.config.get("PASSWORD_HASHER")),
        "tokens": tokens,
    }

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    register_error_handlers(app)
    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping() -> str:
        """
        Root URL for simple 'online' check.
        """
        return "Eventos Server is running!!"

    @app.route("/health")
    def health() -> Tuple[Response, int]:
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


def main() -> None:
    app = create_app()
    port = app.config["PORT"]
    logging.info(f"Server listening on port {port}")
    try:
        app.run(host="0.0.0.0", port=port)
    finally:
        app.extensions["eventos"]["db"].dispose()


if __name__ == "__main__":
    main()
