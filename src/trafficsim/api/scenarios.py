"""
Scenario Routes

    GET    /scenarios       - List all scenarios
    GET    /scenarios/<id>  - Get one scenario
    POST   /scenarios       - Create a scenario
    PUT    /scenarios/<id>  - Update a scenario
    DELETE /scenarios/<id>  - Delete a scenario
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import ValidationError
from ..scenarios.models import ScenarioCreate, ScenarioUpdate, parse_model
from ..scenarios.store import ScenarioStore

scenarios_bp = Blueprint('scenarios', __name__)


def get_store() -> ScenarioStore:
    return current_app.extensions['trafficsim.scenarios']


def json_body() -> dict:
    """Request body as a dict; an empty body counts as {}"""
    if not request.get_data():
        return {}
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be a JSON object")
    return data


@scenarios_bp.route('/scenarios', methods=['GET'])
def list_scenarios():
    """Get all scenarios"""
    scenarios = get_store().list()
    return jsonify([scenario.to_dict() for scenario in scenarios])


@scenarios_bp.route('/scenarios/<scenario_id>', methods=['GET'])
def get_scenario(scenario_id: str):
    """Get a specific scenario"""
    return jsonify(get_store().get(scenario_id).to_dict())


@scenarios_bp.route('/scenarios', methods=['POST'])
def create_scenario():
    """Create a new scenario"""
    body = parse_model(ScenarioCreate, json_body())
    scenario = get_store().create(
        name=body.name,
        description=body.description,
        vehicles=body.vehicles,
        signals=body.signals,
    )
    return jsonify(scenario.to_dict()), 201


@scenarios_bp.route('/scenarios/<scenario_id>', methods=['PUT'])
def update_scenario(scenario_id: str):
    """Update fields of an existing scenario"""
    body = parse_model(ScenarioUpdate, json_body())
    scenario = get_store().update(scenario_id, **body.provided_fields())
    return jsonify(scenario.to_dict())


@scenarios_bp.route('/scenarios/<scenario_id>', methods=['DELETE'])
def delete_scenario(scenario_id: str):
    """Delete a scenario"""
    get_store().delete(scenario_id)
    return '', 204
