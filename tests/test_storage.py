from datetime import datetime

import pytest

from priorart.config import StorageConfig
from priorart.exceptions import PersistenceError
from priorart.models import InfringementAlert, MonitoringRecord
from priorart.storage import JsonResultStore


@pytest.fixture
def json_store(tmp_path) -> JsonResultStore:
    return JsonResultStore(StorageConfig(
        results_dir=tmp_path / "results",
        monitoring_dir=tmp_path / "monitoring",
        output_dir=tmp_path / "outputs",
    ))


def test_replace_results_overwrites(json_store):
    json_store.replace_results("abc", [{"title": "old", "similarity_score": 0.2}])
    json_store.replace_results("abc", [{"title": "new", "similarity_score": 0.9}])

    assert json_store.get_results("abc") == [{"title": "new", "similarity_score": 0.9}]


def test_get_results_for_unknown_session(json_store):
    assert json_store.get_results("missing") == []


def test_session_ids_are_sanitized(json_store, tmp_path):
    json_store.replace_results("../escape/attempt", [{"title": "x"}])

    files = list((tmp_path / "results").iterdir())
    assert len(files) == 1
    assert files[0].parent == tmp_path / "results"
    assert json_store.get_results("../escape/attempt") == [{"title": "x"}]


def test_write_failure_raises_persistence_error(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    store = JsonResultStore(StorageConfig(
        results_dir=blocker / "results",
        monitoring_dir=tmp_path / "monitoring",
        output_dir=tmp_path / "outputs",
    ))

    with pytest.raises(PersistenceError):
        store.replace_results("abc", [{"title": "x"}])


def test_corrupt_document_raises_persistence_error(json_store, tmp_path):
    (tmp_path / "results").mkdir()
    (tmp_path / "results" / "abc.json").write_text("{not json")

    with pytest.raises(PersistenceError):
        json_store.get_results("abc")


def test_monitoring_upsert_and_lookup(json_store):
    now = datetime(2026, 1, 5, 9, 30)
    record = MonitoringRecord(search_query="pool cover", idea_id="idea-1", results_found=3,
                              highest_similarity_score=0.5, last_search_at=now)
    json_store.upsert_monitoring(record)

    updated = MonitoringRecord(search_query="pool cover v2", idea_id="idea-1", results_found=4,
                               last_search_at=now)
    json_store.upsert_monitoring(updated)

    found = json_store.find_monitoring(idea_id="idea-1")
    assert found.search_query == "pool cover v2"
    assert found.results_found == 4
    assert found.last_search_at == now
    assert json_store.find_monitoring(session_id="other") is None
    assert len(list(json_store.monitoring_dir.glob("*.json"))) == 1


def test_alerts_append(json_store):
    for severity in ("high", "critical"):
        json_store.add_alert(InfringementAlert(
            severity=severity, title="t", description="d", confidence_score=0.9, idea_id="i"
        ))

    assert [a["severity"] for a in json_store.list_alerts()] == ["high", "critical"]


def test_in_memory_store_replace(store):
    store.replace_results("s", [{"title": "a"}])
    store.replace_results("s", [])
    assert store.get_results("s") == []
