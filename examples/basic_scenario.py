#!/usr/bin/env python3
"""
Basic Scenario Example
======================

This example demonstrates how to use the traffic scenario service through
the Flask test client: create a scenario, update it, upload a scenario file
and list what was stored.

Usage:
    python examples/basic_scenario.py
"""

import io
import json
import sys
import tempfile
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from trafficsim.api.server import create_app
from trafficsim.config.settings import ServerConfig


def main():
    """Run basic scenario example"""
    print("=" * 60)
    print("Traffic Scenario Service - Basic Example")
    print("=" * 60)

    workdir = Path(tempfile.mkdtemp(prefix="trafficsim-"))
    config = ServerConfig(data_file=workdir / "scenarios.json", upload_dir=workdir / "uploads")
    client = create_app(config).test_client()

    # Step 1: Create a scenario
    print("\n1. Creating scenario...")
    scenario = client.post('/api/scenarios', json={
        'name': 'Rush Hour',
        'description': 'Evening commute through downtown',
        'vehicles': [{
            'id': 'car-1',
            'startLat': 40.7128, 'startLng': -74.0060,
            'endLat': 40.7580, 'endLng': -73.9855,
            'speed': 45.0, 'headway': 2.5
        }],
        'signals': [{
            'id': 'signal-1',
            'lat': 40.7306, 'lng': -73.9866,
            'cycle': {'red': 30, 'yellow': 4, 'green': 26}
        }]
    }).get_json()
    print(f"   Id: {scenario['id']}")
    print(f"   Vehicles: {len(scenario['vehicles'])}, signals: {len(scenario['signals'])}")

    # Step 2: Update it
    print("\n2. Clearing the description...")
    updated = client.put(f"/api/scenarios/{scenario['id']}", json={'description': ''}).get_json()
    print(f"   Description: {updated['description']!r}, modified: {updated['modified']}")

    # Step 3: Upload a scenario file
    print("\n3. Uploading scenario file...")
    document = json.dumps({'vehicles': scenario['vehicles'], 'signals': []}).encode('utf-8')
    response = client.post(
        '/api/uploads/scenario',
        data={'scenario': (io.BytesIO(document), 'rush_hour.json', 'application/json')},
        content_type='multipart/form-data'
    ).get_json()
    print(f"   Stored as: {response['file']['filename']}")
    print(f"   Preview: {response['file']['preview']}")

    # Step 4: List uploads
    print("\n4. Uploaded files:")
    for item in client.get('/api/uploads').get_json()['files']:
        print(f"   - {item['filename']} ({item['size']} bytes)")

    print(f"\nData written to {workdir}")


if __name__ == "__main__":
    main()
