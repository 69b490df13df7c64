"""
Tests for the JSON-file activity log.

This test suite verifies that JsonFileLogStore:
- Persists entries across instances
- Keeps only the most recent entries
- Treats a missing or corrupt file as an empty log
- Reports write failures instead of raising
"""

import asyncio
import json
import pytest
from invoice_extractor.core.errors import LogStoreError
from invoice_extractor.models.invoice import LogEntry
from invoice_extractor.services.storage import InMemoryLogStore, JsonFileLogStore


def entry(n: int = 0, **kwargs) -> LogEntry:
    return LogEntry(action="upload", status="processing", file_name=f"invoice-{n}.pdf", **kwargs)


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "logs" / "activity.json"


@pytest.fixture
def store(log_path):
    return JsonFileLogStore(str(log_path))


def test_list_before_first_write_is_empty(store):
    assert asyncio.run(store.list()) == []


def test_append_writes_json_array(store, log_path):
    assert asyncio.run(store.append(entry(1))) is True

    on_disk = json.loads(log_path.read_text(encoding="utf-8"))
    assert len(on_disk) == 1
    assert on_disk[0]["action"] == "upload"
    assert on_disk[0]["status"] == "processing"
    assert on_disk[0]["fileName"] == "invoice-1.pdf"
    assert isinstance(on_disk[0]["id"], int)
    # Optional keys are omitted, not null
    assert "error" not in on_disk[0]
    assert "data" not in on_disk[0]


def test_ids_strictly_increase(store):
    async def append_many():
        for n in range(5):
            await store.append(entry(n))
        return await store.list()

    ids = [e["id"] for e in asyncio.run(append_many())]
    assert ids == sorted(ids)
    assert len(set(ids)) == 5


def test_persistence_across_instances(log_path):
    asyncio.run(JsonFileLogStore(str(log_path)).append(entry(7)))

    logs = asyncio.run(JsonFileLogStore(str(log_path)).list())
    assert [e["fileName"] for e in logs] == ["invoice-7.pdf"]


def test_capacity_evicts_oldest(store):
    async def fill():
        for n in range(101):
            await store.append(entry(n))
        return await store.list()

    logs = asyncio.run(fill())
    assert len(logs) == 100
    assert logs[0]["fileName"] == "invoice-1.pdf"
    assert logs[-1]["fileName"] == "invoice-100.pdf"


def test_custom_capacity(log_path):
    store = JsonFileLogStore(str(log_path), capacity=3)

    async def fill():
        for n in range(5):
            await store.append(entry(n))
        return await store.list()

    assert [e["fileName"] for e in asyncio.run(fill())] == [
        "invoice-2.pdf", "invoice-3.pdf", "invoice-4.pdf"
    ]


def test_concurrent_appends_are_not_lost(store):
    async def burst():
        await asyncio.gather(*(store.append(entry(n)) for n in range(20)))
        return await store.list()

    assert len(asyncio.run(burst())) == 20


def test_corrupt_file_is_treated_as_empty(store, log_path):
    log_path.parent.mkdir(parents=True)
    log_path.write_text("{not json", encoding="utf-8")

    assert asyncio.run(store.list()) == []
    assert asyncio.run(store.append(entry(1))) is True
    assert len(asyncio.run(store.list())) == 1


def test_non_array_file_is_treated_as_empty(store, log_path):
    log_path.parent.mkdir(parents=True)
    log_path.write_text('{"id": 1}', encoding="utf-8")

    assert asyncio.run(store.list()) == []


def test_write_failure_returns_false(tmp_path):
    # The log path is a directory, so neither read nor write can succeed
    blocked = tmp_path / "activity.json"
    blocked.mkdir()
    store = JsonFileLogStore(str(blocked))

    assert asyncio.run(store.append(entry(1))) is False


def test_list_read_failure_raises(tmp_path):
    blocked = tmp_path / "activity.json"
    blocked.mkdir()
    store = JsonFileLogStore(str(blocked))

    with pytest.raises(LogStoreError):
        asyncio.run(store.list())


def test_entry_with_record_round_trips(store, sample_record):
    asyncio.run(store.append(LogEntry(action="extraction", status="success", file_name="a.pdf", data=sample_record)))

    stored = asyncio.run(store.list())[0]
    assert stored["data"]["invoiceNumber"] == "INV-1"
    assert stored["data"]["lineItems"][0]["description"] == "Widget"


def test_in_memory_store_matches_contract():
    store = InMemoryLogStore(capacity=2)

    async def run():
        for n in range(3):
            assert await store.append(entry(n)) is True
        return await store.list()

    logs = asyncio.run(run())
    assert [e["fileName"] for e in logs] == ["invoice-1.pdf", "invoice-2.pdf"]
    assert logs[0]["id"] < logs[1]["id"]


def test_non_object_entries_are_dropped(store, log_path):
    log_path.parent.mkdir(parents=True)
    log_path.write_text('[1, null, "text", {"id": 5, "action": "upload", "status": "processing", "fileName": "old.pdf"}]', encoding="utf-8")

    assert [e["fileName"] for e in asyncio.run(store.list())] == ["old.pdf"]
    assert asyncio.run(store.append(entry(1))) is True

    logs = asyncio.run(store.list())
    assert [e["fileName"] for e in logs] == ["old.pdf", "invoice-1.pdf"]
    assert logs[1]["id"] > 5
    assert all(isinstance(e, dict) for e in json.loads(log_path.read_text(encoding="utf-8")))


def test_unexpected_append_error_returns_false(store):
    def broken(_entry):
        raise AttributeError("'int' object has no attribute 'get'")

    store._append_sync = broken

    assert asyncio.run(store.append(entry(1))) is False
