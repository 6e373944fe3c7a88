"""
Shared fixtures for the traffic scenario service tests.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from trafficsim.api.server import create_app
from trafficsim.config.settings import ServerConfig
from trafficsim.scenarios.store import ScenarioStore
from trafficsim.uploads.service import UploadService


@pytest.fixture
def config(tmp_path):
    return ServerConfig(
        data_file=tmp_path / "data" / "scenarios.json",
        upload_dir=tmp_path / "uploads",
    )


@pytest.fixture
def app(config):
    app = create_app(config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(tmp_path):
    return ScenarioStore(tmp_path / "scenarios.json")


@pytest.fixture
def upload_service(tmp_path):
    return UploadService(tmp_path / "uploads")


@pytest.fixture
def sample_vehicle():
    return {
        'id': 'v1',
        'startLat': 40.7128,
        'startLng': -74.0060,
        'endLat': 40.7580,
        'endLng': -73.9855,
        'speed': 50.0,
        'headway': 2.0
    }


@pytest.fixture
def sample_signal():
    return {
        'id': 's1',
        'lat': 40.7306,
        'lng': -73.9866,
        'cycle': {'red': 30, 'yellow': 5, 'green': 25}
    }
