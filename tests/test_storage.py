"""Unit tests for snapshot persistence."""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from parking_tracker.state import (
    AppState,
    AssignCar,
    LoadState,
    ParkingStore,
    ResetState,
    create_initial_state,
    reduce,
)
from parking_tracker.storage import (
    DebouncedSaver,
    StateStorage,
    deserialize_from_storage,
    serialize_for_storage,
)

T0 = datetime(2025, 9, 23, 17, 0, 0, tzinfo=timezone.utc)


def make_busy_state() -> AppState:
    state = reduce(create_initial_state(), AssignCar(1, "MH12AB1234", T0))
    state = reduce(state, AssignCar(5, "KA01CD5678", T0 + timedelta(minutes=3, microseconds=250)))
    return state.model_copy(update={"reg_index": 4, "total_revenue": 21.0})


class TestSerialization:
    def test_datetimes_are_tagged(self):
        text = serialize_for_storage({"date": T0, "string": "test"})
        data = json.loads(text)
        assert data["date"] == {"__type": "Date", "value": "2025-09-23T17:00:00+00:00"}

    def test_tagged_datetimes_are_restored(self):
        restored = deserialize_from_storage(serialize_for_storage({"date": T0, "string": "test"}))
        assert restored["date"] == T0
        assert isinstance(restored["date"], datetime)
        assert restored["string"] == "test"

    def test_snapshot_shape(self):
        data = json.loads(serialize_for_storage(make_busy_state()))
        assert set(data) == {"slots", "regIndex", "totalRevenue"}
        assert data["slots"][0]["status"] == "occupied"
        assert data["slots"][0]["carNumber"] == "MH12AB1234"
        assert data["slots"][1] == {"id": 2, "status": "available", "carNumber": None, "entryTime": None}


class TestStateStorage:
    def test_round_trip(self, tmp_path):
        storage = StateStorage(tmp_path / "state.json")
        state = make_busy_state()

        assert storage.save(state) is True
        loaded = storage.load()

        assert AppState.model_validate(loaded) == state
        assert reduce(create_initial_state(), LoadState(loaded)) == state

    def test_missing_file_loads_none(self, tmp_path):
        assert StateStorage(tmp_path / "absent.json").load() is None

    def test_corrupt_file_loads_none(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        assert StateStorage(path).load() is None

    @pytest.mark.parametrize("value", [123, None, ["2025-09-23"], "not a date"])
    def test_malformed_date_tag_loads_none(self, tmp_path, caplog, value):
        path = tmp_path / "state.json"
        snapshot = {"slots": [{"id": 1, "entryTime": {"__type": "Date", "value": value}}]}
        path.write_text(json.dumps(snapshot), encoding="utf-8")

        assert StateStorage(path).load() is None
        assert "Failed to load state" in caplog.text

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        storage = StateStorage(blocker / "state.json")
        assert storage.save(make_busy_state()) is False

    def test_clear(self, tmp_path):
        storage = StateStorage(tmp_path / "state.json")
        storage.save(make_busy_state())
        assert storage.clear() is True
        assert storage.load() is None
        assert storage.clear() is True

    def test_info(self, tmp_path):
        storage = StateStorage(tmp_path / "state.json")
        assert storage.is_available()
        assert storage.get_info().used == 0

        storage.save(make_busy_state())
        info = storage.get_info()
        assert info.available
        assert info.used == (tmp_path / "state.json").stat().st_size


class TestDebouncedSaver:
    def test_saves_immediately_without_event_loop(self, tmp_path):
        storage = StateStorage(tmp_path / "state.json")
        store = ParkingStore(slot_count=3)
        store.subscribe(DebouncedSaver(storage, delay_seconds=10))

        store.assign_car(2, "MH12AB1234", T0)

        assert AppState.model_validate(storage.load()) == store.state

    @pytest.mark.asyncio
    async def test_burst_is_coalesced(self, tmp_path):
        storage = StateStorage(tmp_path / "state.json")
        saver = DebouncedSaver(storage, delay_seconds=0.05)
        store = ParkingStore(slot_count=3)
        store.subscribe(saver)

        store.assign_car(1, "MH12AB1234", T0)
        store.add_revenue(5)
        store.increment_reg_index()

        assert saver.has_pending
        assert storage.load() is None

        await asyncio.sleep(0.2)

        assert not saver.has_pending
        assert AppState.model_validate(storage.load()) == store.state

    @pytest.mark.asyncio
    async def test_reset_is_written_immediately(self, tmp_path):
        storage = StateStorage(tmp_path / "state.json")
        saver = DebouncedSaver(storage, delay_seconds=60)

        state = create_initial_state(3)
        saver(state, ResetState())

        assert not saver.has_pending
        assert AppState.model_validate(storage.load()) == state

    @pytest.mark.asyncio
    async def test_flush_writes_pending_state(self, tmp_path):
        storage = StateStorage(tmp_path / "state.json")
        saver = DebouncedSaver(storage, delay_seconds=60)
        store = ParkingStore(slot_count=3)
        store.subscribe(saver)

        store.add_revenue(12)
        assert saver.flush() is True

        assert AppState.model_validate(storage.load()).total_revenue == 12
        assert saver.flush() is True
