"""
Traffic Scenario Service
========================

REST backend for a traffic simulation front end. It persists named
traffic scenarios (vehicles and signal definitions) to a JSON file and
manages uploaded scenario and traffic data files.

Main Components:
- Scenario store with file-backed CRUD operations
- Upload service with type filtering and JSON/CSV previews
- Flask REST API
- Server configuration from files and environment

Usage:
    >>> from trafficsim.api.server import create_app
    >>> app = create_app()
    >>> app.run(port=3001)
"""

__version__ = "1.0.0"
