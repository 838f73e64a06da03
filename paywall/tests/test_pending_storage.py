"""Tests for durable storage and the pending-result holder."""
import json

import pytest

from paywall.models import PendingResult
from paywall.pending import PendingResultHolder
from paywall.storage import PENDING_RESULT_KEY, JsonFileStorage, MemoryStorage


class TestMemoryStorage:
    def test_get_set_delete(self):
        storage = MemoryStorage({"a": "1"})

        assert storage.get("a") == "1"
        storage.set("b", "2")
        storage.delete("a")
        storage.delete("missing")

        assert storage.get("a") is None
        assert storage.get("b") == "2"


class TestJsonFileStorage:
    def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "client" / "state.json"
        JsonFileStorage(path).set("fairway.token", "tok")

        assert JsonFileStorage(path).get("fairway.token") == "tok"
        assert not path.with_suffix(".json.tmp").exists()

    def test_delete(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "state.json")
        storage.set("a", "1")
        storage.set("b", "2")
        storage.delete("a")

        assert json.loads((tmp_path / "state.json").read_text()) == {"b": "2"}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        storage = JsonFileStorage(path)

        assert storage.get("a") is None
        storage.set("a", "1")
        assert storage.get("a") == "1"

    def test_missing_file(self, tmp_path):
        assert JsonFileStorage(tmp_path / "nope.json").get("a") is None


class TestPendingResult:
    def test_from_dict_round_trip(self, preview, snapshot):
        original = PendingResult(payload=preview, form_snapshot=snapshot)
        restored = PendingResult.from_dict(json.loads(json.dumps(original.to_dict())))

        assert restored == original

    @pytest.mark.parametrize(
        "data",
        [
            None,
            [],
            {},
            {"payload": "text"},
            {"payload": {}, "formSnapshot": "x"},
            {"payload": {}, "createdAt": 1760745600},
            {"payload": {}, "createdAt": "yesterday"},
        ],
    )
    def test_from_dict_rejects_bad_values(self, data):
        with pytest.raises(ValueError):
            PendingResult.from_dict(data)


class TestPendingResultHolder:
    def test_store_and_restore(self, pending, preview, snapshot):
        pending.store(preview, snapshot)
        assert pending.restore().payload == preview

    def test_survives_memory_loss(self, pending, storage, preview, snapshot):
        pending.store(preview, snapshot)

        pending.forget_memory()
        assert pending.restore().payload == preview

        # A brand-new holder over the same storage sees it too
        assert PendingResultHolder(storage).restore().form_snapshot == snapshot

    def test_take_is_once_only(self, pending, storage, preview, snapshot):
        pending.store(preview, snapshot)

        assert pending.take().payload == preview
        assert pending.take() is None
        assert storage.get(PENDING_RESULT_KEY) is None

    def test_clear(self, pending, preview, snapshot):
        pending.store(preview, snapshot)
        pending.clear()

        assert pending.restore() is None
        assert not pending.has_pending

    def test_store_replaces_previous(self, pending, preview, snapshot):
        pending.store({"summary": "old"}, snapshot)
        pending.store(preview, snapshot)
        pending.forget_memory()

        assert pending.restore().payload == preview

    def test_unreadable_value_discarded(self, storage):
        storage.set(PENDING_RESULT_KEY, json.dumps({"payload": None}))
        holder = PendingResultHolder(storage)

        assert holder.restore() is None
        assert storage.get(PENDING_RESULT_KEY) is None

    def test_invalid_json_discarded(self, storage):
        storage.set(PENDING_RESULT_KEY, "{truncated")
        assert PendingResultHolder(storage).restore() is None

    def test_bad_timestamp_discarded(self, storage):
        storage.set(PENDING_RESULT_KEY, json.dumps({"payload": {"summary": {}}, "createdAt": 1760745600}))
        holder = PendingResultHolder(storage)

        assert holder.restore() is None
        assert storage.get(PENDING_RESULT_KEY) is None
