"""
API Module
==========

This module provides the REST API server for communication between
the Python backend and the web frontend.

Key Features:
- RESTful API endpoints
- JSON data exchange
- Multipart file uploads and downloads
- Error handling and validation

Routes:
    /api/scenarios - Scenario management
    /api/uploads - Scenario and data file uploads
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
