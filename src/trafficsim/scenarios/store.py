"""
Scenario Store

File-backed collection of traffic scenarios. The whole collection lives in a
single JSON array and every operation is a read-modify-write of that file.

Mutations on one file are serialized by a re-entrant lock shared by every
store bound to the same path, so concurrent requests cannot lose each
other's updates. The file itself is rewritten in place: a crash mid-write
can leave it corrupt, and a corrupt file reads back as an empty store.
"""

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..errors import NotFoundError, StoreIOError, ValidationError
from .models import Scenario, as_records, describe_validation_error, timestamp

logger = logging.getLogger(__name__)

_scenario_list = TypeAdapter(List[Scenario])

_file_locks: Dict[Path, threading.RLock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    """Return the lock shared by all stores writing ``path``"""
    with _file_locks_guard:
        lock = _file_locks.get(path)
        if lock is None:
            lock = threading.RLock()
            _file_locks[path] = lock
        return lock


class ScenarioStore:
    """
    CRUD operations over a JSON file of scenarios.

    Features:
    - Whole-collection load and save
    - Missing or unparsable file treated as an empty store
    - Stored records loaded without range checks
    - Unique random ids for new scenarios
    - Per-file serialization of all operations
    """

    def __init__(self, data_file: Union[str, Path]):
        """
        Initialize scenario store

        Args:
            data_file: Path of the JSON file holding the scenario array
        """
        self.data_file = Path(data_file).resolve()
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        self._lock = _lock_for(self.data_file)

    def _load(self) -> List[Scenario]:
        if not self.data_file.exists():
            return []
        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return _scenario_list.validate_python(data)
        except (OSError, ValueError) as e:
            # PydanticValidationError is a ValueError
            logger.error(f"Error loading scenarios from {self.data_file}: {e}")
            return []

    def _save(self, scenarios: List[Scenario]):
        payload = [scenario.to_dict() for scenario in scenarios]
        try:
            with open(self.data_file, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2)
        except (OSError, TypeError) as e:
            logger.error(f"Error saving scenarios to {self.data_file}: {e}")
            raise StoreIOError(f"Failed to write {self.data_file}: {e}") from e
        logger.debug(f"Saved {len(payload)} scenarios to {self.data_file}")

    @staticmethod
    def _index_of(scenarios: List[Scenario], scenario_id: str) -> int:
        for index, scenario in enumerate(scenarios):
            if scenario.id == scenario_id:
                return index
        raise NotFoundError("Scenario not found")

    def list(self) -> List[Scenario]:
        """Get all scenarios in stored order"""
        with self._lock:
            return self._load()

    def get(self, scenario_id: str) -> Scenario:
        """
        Get a scenario by id

        Raises:
            NotFoundError: if no scenario has this id
        """
        with self._lock:
            scenarios = self._load()
            return scenarios[self._index_of(scenarios, scenario_id)]

    def create(self, name: Optional[str], description: Optional[str] = None,
               vehicles: Optional[List] = None, signals: Optional[List] = None) -> Scenario:
        """
        Create and persist a new scenario

        Args:
            name: Scenario name (required, non-empty)
            description: Free-text description, empty when omitted
            vehicles: Vehicles (models or dicts), empty when omitted; stored as given
            signals: Signals (models or dicts), empty when omitted; stored as given

        Returns:
            The stored scenario
        """
        if not name:
            raise ValidationError("Scenario name is required")

        with self._lock:
            scenarios = self._load()
            existing_ids = {scenario.id for scenario in scenarios}
            scenario_id = uuid.uuid4().hex
            while scenario_id in existing_ids:
                scenario_id = uuid.uuid4().hex

            now = timestamp()
            try:
                scenario = Scenario(
                    id=scenario_id,
                    name=name,
                    description=description or '',
                    vehicles=as_records(vehicles or []),
                    signals=as_records(signals or []),
                    created=now,
                    modified=now,
                )
            except PydanticValidationError as e:
                raise ValidationError(describe_validation_error(e)) from e

            scenarios.append(scenario)
            self._save(scenarios)

        logger.info(f"Created scenario {scenario.id} ({scenario.name!r})")
        return scenario

    def update(self, scenario_id: str, **fields) -> Scenario:
        """
        Merge fields over an existing scenario

        Provided fields overwrite, including an empty description; fields
        that are omitted or None keep their stored value. ``id`` and
        ``created`` are never changed.
        """
        changes = {
            key: value for key, value in fields.items()
            if key in ('name', 'description', 'vehicles', 'signals') and value is not None
        }
        for key in ('vehicles', 'signals'):
            if key in changes:
                changes[key] = as_records(changes[key])

        with self._lock:
            scenarios = self._load()
            index = self._index_of(scenarios, scenario_id)
            if 'name' in changes and not changes['name']:
                raise ValidationError("Scenario name cannot be empty")

            merged = scenarios[index].model_dump()
            merged.update(changes)
            merged['modified'] = timestamp()
            try:
                scenarios[index] = Scenario.model_validate(merged)
            except PydanticValidationError as e:
                raise ValidationError(describe_validation_error(e)) from e

            self._save(scenarios)
            updated = scenarios[index]

        logger.info(f"Updated scenario {scenario_id}")
        return updated

    def delete(self, scenario_id: str):
        """
        Remove a scenario

        Raises:
            NotFoundError: if no scenario has this id
        """
        with self._lock:
            scenarios = self._load()
            index = self._index_of(scenarios, scenario_id)
            del scenarios[index]
            self._save(scenarios)

        logger.info(f"Deleted scenario {scenario_id}")
