"""
Scenarios Module

Scenario data models and the file-backed scenario store.
"""

from .models import Scenario, ScenarioCreate, ScenarioUpdate, Signal, SignalCycle, Vehicle
from .store import ScenarioStore

__all__ = ["Scenario", "ScenarioCreate", "ScenarioUpdate", "Signal", "SignalCycle",
           "Vehicle", "ScenarioStore"]
