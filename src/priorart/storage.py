"""
Prior-Art Ranker - Result Storage
=================================
Persistence for ranked prior-art results, monitoring records and alerts.

Results for a session are replaced wholesale on every search; there is no
incremental update.

License: MIT
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Dict, Any, Optional

import orjson

from priorart.config import config, StorageConfig
from priorart.exceptions import PersistenceError
from priorart.models import InfringementAlert, MonitoringRecord

logger = logging.getLogger(__name__)


class ResultStore(ABC):
    """Storage interface used by the search agent and the monitor."""

    @abstractmethod
    def replace_results(self, session_id: str, rows: List[Dict[str, Any]]) -> None:
        """Delete any stored results for the session, then store `rows`."""

    @abstractmethod
    def get_results(self, session_id: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def find_monitoring(
        self, idea_id: Optional[str] = None, session_id: Optional[str] = None
    ) -> Optional[MonitoringRecord]:
        ...

    @abstractmethod
    def upsert_monitoring(self, record: MonitoringRecord) -> None:
        ...

    @abstractmethod
    def add_alert(self, alert: InfringementAlert) -> None:
        ...

    @abstractmethod
    def list_alerts(self) -> List[Dict[str, Any]]:
        ...


# =============================================================================
# In-memory Store
# =============================================================================

class InMemoryResultStore(ResultStore):
    """Dict-backed store for ephemeral runs."""

    def __init__(self):
        self.results: Dict[str, List[Dict[str, Any]]] = {}
        self.monitoring: Dict[str, MonitoringRecord] = {}
        self.alerts: List[Dict[str, Any]] = []

    def replace_results(self, session_id: str, rows: List[Dict[str, Any]]) -> None:
        self.results.pop(session_id, None)
        self.results[session_id] = [dict(r) for r in rows]

    def get_results(self, session_id: str) -> List[Dict[str, Any]]:
        return list(self.results.get(session_id, []))

    def find_monitoring(self, idea_id=None, session_id=None) -> Optional[MonitoringRecord]:
        for record in self.monitoring.values():
            if (idea_id and record.idea_id == idea_id) or (session_id and record.session_id == session_id):
                return record
        return None

    def upsert_monitoring(self, record: MonitoringRecord) -> None:
        existing = self.find_monitoring(record.idea_id, record.session_id)
        if existing is not None:
            self.monitoring.pop(existing.key, None)
        self.monitoring[record.key] = record

    def add_alert(self, alert: InfringementAlert) -> None:
        self.alerts.append(alert.to_dict())

    def list_alerts(self) -> List[Dict[str, Any]]:
        return list(self.alerts)


# =============================================================================
# JSON File Store
# =============================================================================

class JsonResultStore(ResultStore):
    """
    One JSON document per session under `results_dir`; monitoring records
    and alerts under `monitoring_dir`.
    """

    def __init__(self, storage_config: StorageConfig = None):
        self.config = storage_config or config.storage
        self.results_dir = Path(self.config.results_dir)
        self.monitoring_dir = Path(self.config.monitoring_dir)
        self.alerts_path = self.monitoring_dir / "alerts.jsonl"

    @staticmethod
    def _safe_name(key: str) -> str:
        return re.sub(r'[^A-Za-z0-9_.-]', '_', key)

    def _results_path(self, session_id: str) -> Path:
        return self.results_dir / f"{self._safe_name(session_id)}.json"

    def _read(self, path: Path) -> Any:
        try:
            return orjson.loads(path.read_bytes())
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e
        except orjson.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt document {path}: {e}") from e

    def _write(self, path: Path, data: Any) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
        except (OSError, TypeError) as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    def replace_results(self, session_id: str, rows: List[Dict[str, Any]]) -> None:
        path = self._results_path(session_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to clear results for {session_id}: {e}") from e

        self._write(path, {"session_id": session_id, "results": rows})
        logger.info(f"Saved {len(rows)} prior art results for session {session_id}")

    def get_results(self, session_id: str) -> List[Dict[str, Any]]:
        path = self._results_path(session_id)
        if not path.exists():
            return []
        return self._read(path).get("results", [])

    def _monitoring_records(self) -> List[MonitoringRecord]:
        if not self.monitoring_dir.exists():
            return []
        return [
            MonitoringRecord.from_dict(self._read(path))
            for path in sorted(self.monitoring_dir.glob("*.json"))
        ]

    def find_monitoring(self, idea_id=None, session_id=None) -> Optional[MonitoringRecord]:
        for record in self._monitoring_records():
            if (idea_id and record.idea_id == idea_id) or (session_id and record.session_id == session_id):
                return record
        return None

    def upsert_monitoring(self, record: MonitoringRecord) -> None:
        existing = self.find_monitoring(record.idea_id, record.session_id)
        if existing is not None and existing.key != record.key:
            try:
                (self.monitoring_dir / f"{self._safe_name(existing.key)}.json").unlink(missing_ok=True)
            except OSError as e:
                raise PersistenceError(f"Failed to replace monitoring record: {e}") from e

        self._write(self.monitoring_dir / f"{self._safe_name(record.key)}.json", record.to_dict())

    def add_alert(self, alert: InfringementAlert) -> None:
        try:
            self.monitoring_dir.mkdir(parents=True, exist_ok=True)
            with open(self.alerts_path, "ab") as f:
                f.write(orjson.dumps(alert.to_dict()) + b"\n")
        except OSError as e:
            raise PersistenceError(f"Failed to record alert: {e}") from e

    def list_alerts(self) -> List[Dict[str, Any]]:
        if not self.alerts_path.exists():
            return []
        try:
            with open(self.alerts_path, "rb") as f:
                return [orjson.loads(line) for line in f if line.strip()]
        except (OSError, orjson.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read alerts: {e}") from e
