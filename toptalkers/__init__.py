"""
Flask application factory
"""
from typing import Optional
from flask import Flask, jsonify, request
from flask_cors import CORS
import logging

from toptalkers.config import Settings, settings as default_settings
from toptalkers.core.listener import RequestListener
from toptalkers.core.scheduler import EpochScheduler
from toptalkers.utils.time_windows import TimeWindowBucketer

logger = logging.getLogger(__name__)


def client_address(trust_proxy_headers: bool = False) -> Optional[str]:
    """
    Address of the client behind the current request

    Args:
        trust_proxy_headers: Prefer the first X-Forwarded-For hop

    Returns:
        Address string, or None when the server did not provide one
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.remote_addr


def create_app(config: Optional[Settings] = None, listener: Optional[RequestListener] = None):
    """
    Create and configure Flask application

    Args:
        config: Settings to use (default: environment-derived settings)
        listener: Listener to inject (default: a new one sized by TOP_N)

    Returns:
        Flask app instance
    """
    config = config or default_settings

    app = Flask(__name__)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if config.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Enable CORS
    CORS(app, origins=config.CORS_ORIGINS)

    # Listener and its reset schedule
    listener = listener or RequestListener(limit=config.TOP_N)
    app.extensions["request_listener"] = listener

    if config.RESET_SCHEDULER_ENABLED:
        scheduler = EpochScheduler(
            listener,
            window=TimeWindowBucketer.parse_window_string(config.RESET_WINDOW),
            poll_interval=config.RESET_POLL_INTERVAL,
        )
        scheduler.start()
        app.extensions["epoch_scheduler"] = scheduler

    # Count every inbound request
    exclude_prefixes = tuple(config.RECORD_EXCLUDE_PREFIXES)

    @app.before_request
    def record_request():
        if exclude_prefixes and request.path.startswith(exclude_prefixes):
            return None

        address = client_address(config.TRUST_PROXY_HEADERS)
        if address is None:
            logger.warning(f"No client address for {request.method} {request.path}; not recorded")
            return None

        listener.record(address)
        return None

    # Register blueprints
    from toptalkers.api.ranking import ranking_bp

    app.register_blueprint(ranking_bp)

    # API info endpoint
    @app.route("/api")
    def api_root():
        return jsonify(
            {
                "name": config.APP_NAME,
                "version": config.APP_VERSION,
                "status": "running",
                "endpoints": {
                    "ranking": f"{config.API_PREFIX}/ranking",
                },
            }
        )

    # API info endpoint
    @app.route(f"{config.API_PREFIX}")
    def api_info():
        return jsonify(
            {
                "name": config.APP_NAME,
                "version": config.APP_VERSION,
                "endpoints": {
                    "GET /ranking": "Top addresses by request count",
                    "POST /ranking/record": "Record a request for an address",
                    "POST /ranking/reset": "Start a new counting epoch",
                    "GET /ranking/count/<address>": "Request count of one address",
                    "GET /ranking/stats": "Listener statistics",
                    "GET /ranking/health": "Health check",
                },
            }
        )

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({"error": "Internal server error"}), 500

    return app
