"""
Scenario store tests.

Usage:
    python -m pytest tests/test_scenario_store.py -v
"""

import json
import threading

import pytest

from trafficsim.errors import NotFoundError, StoreIOError, ValidationError
from trafficsim.scenarios.models import Vehicle
from trafficsim.scenarios.store import ScenarioStore


class TestScenarioStoreLoading:
    """Test reading the scenario file"""

    def test_missing_file_is_empty(self, store):
        """A store without a file lists no scenarios"""
        assert not store.data_file.exists()
        assert store.list() == []

    def test_corrupt_file_is_empty(self, store):
        """Unparsable content degrades to an empty store"""
        store.data_file.write_text("[{\"id\": ", encoding='utf-8')
        assert store.list() == []

    def test_non_array_content_is_empty(self, store):
        store.data_file.write_text(json.dumps({'id': 'x'}), encoding='utf-8')
        assert store.list() == []

    def test_creates_parent_directory(self, tmp_path):
        store = ScenarioStore(tmp_path / "nested" / "data" / "scenarios.json")
        assert store.data_file.parent.is_dir()

    def test_out_of_range_records_kept(self, store, sample_vehicle, sample_signal):
        """Records outside the request limits load and survive later writes"""
        legacy_vehicle = {'id': 'old', 'startLat': 200.0, 'startLng': 0.0, 'speed': -5}
        legacy_signal = {'id': 'sig', 'lat': 10.0, 'lng': 10.0, 'cycle': {'red': 0}}
        records = [
            {'id': '1', 'name': 'Good', 'description': '', 'vehicles': [sample_vehicle],
             'signals': [sample_signal], 'created': '2024-01-01T00:00:00.000Z',
             'modified': '2024-01-01T00:00:00.000Z'},
            {'id': '2', 'name': 'Legacy', 'description': 'written by an older client',
             'vehicles': [legacy_vehicle], 'signals': [legacy_signal],
             'created': '2023-05-01T08:00:00.000Z', 'modified': '2023-05-01T08:00:00.000Z'},
        ]
        store.data_file.write_text(json.dumps(records), encoding='utf-8')

        assert [s.id for s in store.list()] == ['1', '2']

        new = store.create("New")

        data = json.loads(store.data_file.read_text(encoding='utf-8'))
        assert [record['id'] for record in data] == ['1', '2', new.id]
        assert data[1]['vehicles'] == [legacy_vehicle]
        assert data[1]['signals'] == [legacy_signal]
        assert data[0] == records[0]

    def test_unknown_keys_preserved(self, store):
        record = {'id': '7', 'name': 'Tagged', 'description': '', 'vehicles': [], 'signals': [],
                  'created': '2024-01-01T00:00:00.000Z', 'modified': '2024-01-01T00:00:00.000Z',
                  'author': 'ops'}
        store.data_file.write_text(json.dumps([record]), encoding='utf-8')

        store.update('7', description='kept')

        data = json.loads(store.data_file.read_text(encoding='utf-8'))
        assert data[0]['author'] == 'ops'
        assert data[0]['description'] == 'kept'


class TestScenarioCreate:
    """Test scenario creation"""

    def test_create_defaults(self, store):
        """Omitted fields get empty defaults"""
        scenario = store.create("Rush Hour")

        assert scenario.id
        assert scenario.name == "Rush Hour"
        assert scenario.description == ""
        assert scenario.vehicles == []
        assert scenario.signals == []
        assert scenario.created == scenario.modified

    def test_create_requires_name(self, store):
        with pytest.raises(ValidationError):
            store.create(None)
        with pytest.raises(ValidationError):
            store.create("")
        assert store.list() == []

    def test_ids_are_unique(self, store):
        ids = [store.create(f"Scenario {i}").id for i in range(20)]
        assert len(set(ids)) == 20
        assert [s.id for s in store.list()] == ids

    def test_create_then_get_round_trip(self, store, sample_vehicle, sample_signal):
        """get() returns a record equal to the one create() returned"""
        created = store.create(
            "Downtown",
            description="Morning peak",
            vehicles=[sample_vehicle],
            signals=[sample_signal],
        )
        fetched = store.get(created.id)

        assert fetched == created
        assert fetched.vehicles[0]['startLat'] == pytest.approx(40.7128)
        assert fetched.signals[0]['cycle']['green'] == 25

    def test_accepts_model_instances(self, store, sample_vehicle):
        vehicle = Vehicle.model_validate(sample_vehicle)
        scenario = store.create("Models", vehicles=[vehicle])
        assert store.get(scenario.id).vehicles == [sample_vehicle]

    def test_vehicles_stored_as_given(self, store, sample_vehicle):
        """Only the name is enforced; range checks belong to the request bodies"""
        sample_vehicle['speed'] = -10
        scenario = store.create("Bad speed", vehicles=[sample_vehicle])
        assert store.get(scenario.id).vehicles == [sample_vehicle]

    def test_file_layout(self, store, sample_vehicle):
        """The file holds a JSON array with camelCase keys"""
        store.create("Layout", vehicles=[sample_vehicle])

        data = json.loads(store.data_file.read_text(encoding='utf-8'))
        assert isinstance(data, list)
        assert data[0]['name'] == "Layout"
        assert data[0]['vehicles'][0]['startLat'] == 40.7128
        assert set(data[0]) == {'id', 'name', 'description', 'vehicles', 'signals', 'created', 'modified'}

    def test_create_over_corrupt_file_replaces_it(self, store):
        store.data_file.write_text("not json", encoding='utf-8')
        scenario = store.create("Fresh start")
        assert [s.id for s in store.list()] == [scenario.id]


class TestScenarioUpdate:
    """Test scenario updates"""

    def test_update_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.update("missing", name="x")

    def test_update_unknown_id_with_empty_name(self, store):
        """An absent id is reported before the name is checked"""
        with pytest.raises(NotFoundError):
            store.update("missing", name="")

    def test_empty_description_is_stored(self, store):
        """An explicitly empty description overwrites the old one"""
        scenario = store.create("Rush Hour", description="Evening traffic")
        updated = store.update(scenario.id, description="")

        assert updated.description == ""
        assert store.get(scenario.id).description == ""

    def test_omitted_fields_preserved(self, store, sample_vehicle):
        scenario = store.create("Rush Hour", description="Evening", vehicles=[sample_vehicle])
        updated = store.update(scenario.id, name="Late Rush")

        assert updated.name == "Late Rush"
        assert updated.description == "Evening"
        assert updated.vehicles == scenario.vehicles
        assert updated.id == scenario.id
        assert updated.created == scenario.created

    def test_none_values_preserved(self, store):
        scenario = store.create("Keep", description="Stays")
        updated = store.update(scenario.id, name=None, description=None)
        assert updated.name == "Keep"
        assert updated.description == "Stays"

    def test_empty_name_rejected(self, store):
        scenario = store.create("Named")
        with pytest.raises(ValidationError):
            store.update(scenario.id, name="")
        assert store.get(scenario.id).name == "Named"

    def test_id_cannot_change(self, store):
        scenario = store.create("Fixed")
        updated = store.update(scenario.id, id="other", created="1970-01-01T00:00:00.000Z")
        assert updated.id == scenario.id
        assert updated.created == scenario.created

    def test_modified_refreshed(self, store):
        scenario = store.create("Clock")
        updated = store.update(scenario.id, signals=[])
        assert updated.modified >= scenario.modified


class TestScenarioDelete:
    """Test scenario deletion"""

    def test_delete_then_get(self, store):
        keep = store.create("Keep")
        gone = store.create("Gone")

        store.delete(gone.id)

        with pytest.raises(NotFoundError):
            store.get(gone.id)
        assert [s.id for s in store.list()] == [keep.id]

    def test_delete_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.delete("missing")


class TestScenarioStoreFailures:
    """Test storage failures"""

    def test_write_failure_raises_store_error(self, tmp_path):
        """A path that cannot be written surfaces as StoreIOError"""
        target = tmp_path / "scenarios.json"
        target.mkdir()
        store = ScenarioStore(target)

        assert store.list() == []
        with pytest.raises(StoreIOError) as excinfo:
            store.create("Unwritable")
        assert excinfo.value.to_dict() == {'error': 'Storage operation failed'}


class TestScenarioStoreConcurrency:
    """Test serialization of concurrent mutations"""

    def test_concurrent_creates_are_not_lost(self, tmp_path):
        """Stores sharing a file serialize their read-modify-write cycles"""
        path = tmp_path / "shared.json"
        stores = [ScenarioStore(path) for _ in range(4)]
        errors = []

        def worker(store, offset):
            try:
                for i in range(10):
                    store.create(f"Scenario {offset}-{i}")
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(s, n)) for n, s in enumerate(stores)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        scenarios = ScenarioStore(path).list()
        assert len(scenarios) == 40
        assert len({s.id for s in scenarios}) == 40
