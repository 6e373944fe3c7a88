"""
API Server
==========

Flask-based REST API server for the traffic scenario service.

Provides endpoints for scenario management and scenario/data file uploads
for the web frontend.

Routes (under the configured API prefix, "/api" by default):
    GET /scenarios - List scenarios
    GET /scenarios/{id} - Get scenario
    POST /scenarios - Create scenario
    PUT /scenarios/{id} - Update scenario
    DELETE /scenarios/{id} - Delete scenario
    POST /uploads/scenario - Upload scenario file
    POST /uploads/data - Upload traffic data file
    GET /uploads - List uploaded files
    DELETE /uploads/{filename} - Delete uploaded file
    GET /uploads/{filename}/download - Download uploaded file
    GET /health - Health check (not prefixed)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .. import __version__
from ..config.settings import ServerConfig
from ..errors import StoreIOError, TrafficSimError
from ..scenarios.store import ScenarioStore
from ..uploads.service import UploadService
from .scenarios import scenarios_bp
from .uploads import uploads_bp

logger = logging.getLogger(__name__)

# Room for multipart boundaries and headers on top of the file itself
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def register_error_handlers(app: Flask):
    """Map service errors and HTTP errors to JSON responses"""

    @app.errorhandler(TrafficSimError)
    def handle_service_error(error: TrafficSimError):
        if isinstance(error, StoreIOError):
            logger.error(f"Storage failure: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        response = jsonify({'error': error.description or error.name})
        response.status_code = error.code
        return response

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception(f"Unhandled error: {error}")
        return jsonify({'error': 'Internal server error'}), 500


def create_app(config: Optional[ServerConfig] = None) -> Flask:
    """
    Create and configure Flask app

    Args:
        config: Server configuration, defaults to ServerConfig()

    Returns:
        Flask application with the scenario store and upload service attached
    """
    config = config or ServerConfig()

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    app.config['TRAFFICSIM'] = config
    CORS(app, origins=config.cors_origins)  # Enable CORS for frontend

    app.extensions['trafficsim.scenarios'] = ScenarioStore(config.data_file)
    app.extensions['trafficsim.uploads'] = UploadService(
        config.upload_dir,
        allowed_mimetypes=config.allowed_mimetypes,
        max_bytes=config.max_upload_bytes,
    )

    app.register_blueprint(scenarios_bp, url_prefix=config.api_prefix or None)
    app.register_blueprint(uploads_bp, url_prefix=config.api_prefix or None)
    register_error_handlers(app)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'OK',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'version': __version__
        })

    logger.debug(f"Scenario file: {config.data_file}, upload directory: {config.upload_dir}")
    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None,
               debug: Optional[bool] = None, config: Optional[ServerConfig] = None):
    """Run the API server"""
    config = config or ServerConfig()
    app = create_app(config)
    host = host or config.host
    port = port or config.port
    debug = config.debug if debug is None else debug
    logger.info(f"Server running on http://{host}:{port} (health check: /health)")
    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == '__main__':
    run_server(debug=True)
