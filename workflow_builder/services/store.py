"""
Persistence adapters.

WorkflowStore is the contract the editor and the HTTP layer rely on:
whole-document load/save/delete plus a summary list. Writes overwrite the
stored document entirely and stamp `updatedAt`; the last writer wins.

CollectionWorkflowStore keeps every workflow in one collection that is read
and rewritten as a whole (a JSON file, a single Redis key, or a dict).
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import redis
from pydantic import ValidationError

from ..errors import PersistenceError
from ..models import Workflow, WorkflowListItem
from ..util.clock import next_updated_at, utc_now_iso

logger = logging.getLogger(__name__)


def to_document(workflow: Workflow) -> Dict[str, Any]:
    """Workflow -> JSON-compatible dict with the export field names."""
    return workflow.model_dump(mode="json", by_alias=True)


def stamp(workflow: Workflow, previous: Optional[Workflow]) -> Workflow:
    """Set the write timestamps; updatedAt never goes backwards."""
    created_at = workflow.created_at or utc_now_iso()
    baseline = previous.updated_at if previous is not None else None
    return workflow.model_copy(
        update={"created_at": created_at, "updated_at": next_updated_at(baseline)}
    )


class WorkflowStore(ABC):
    """Whole-document persistence for workflows."""

    @abstractmethod
    def load(self, workflow_id: str) -> Optional[Workflow]:
        """The stored workflow, or None when the id is unknown."""

    @abstractmethod
    def save(self, workflow: Workflow) -> Workflow:
        """Insert or overwrite; returns the stored value with fresh `updatedAt`."""

    @abstractmethod
    def delete(self, workflow_id: str) -> bool:
        """True when something was deleted."""

    @abstractmethod
    def list(self) -> List[WorkflowListItem]:
        """Summaries of every stored workflow."""

    def exists(self, workflow_id: str) -> bool:
        return self.load(workflow_id) is not None


class CollectionWorkflowStore(WorkflowStore):
    """Store that reads and rewrites the whole collection on every write."""

    def __init__(self):
        self._lock = threading.Lock()

    @abstractmethod
    def _read_all(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def _write_all(self, documents: List[Dict[str, Any]]) -> None:
        ...

    def _load_all(self) -> List[Workflow]:
        documents = self._read_all()
        try:
            return [Workflow.model_validate(doc) for doc in documents]
        except ValidationError as exc:
            raise PersistenceError(f"Stored workflow collection is malformed: {exc}") from exc

    def load(self, workflow_id: str) -> Optional[Workflow]:
        return next((w for w in self._load_all() if w.id == workflow_id), None)

    def save(self, workflow: Workflow) -> Workflow:
        with self._lock:
            workflows = self._load_all()
            index = next((i for i, w in enumerate(workflows) if w.id == workflow.id), -1)
            stored = stamp(workflow, workflows[index] if index >= 0 else None)
            if index >= 0:
                workflows[index] = stored
            else:
                workflows.append(stored)
            self._write_all([to_document(w) for w in workflows])
        logger.debug("saved workflow %s (%d in collection)", workflow.id, len(workflows))
        return stored

    def delete(self, workflow_id: str) -> bool:
        with self._lock:
            documents = self._read_all()
            remaining = [d for d in documents if d.get("id") != workflow_id]
            if len(remaining) == len(documents):
                return False
            self._write_all(remaining)
        logger.debug("deleted workflow %s", workflow_id)
        return True

    def list(self) -> List[WorkflowListItem]:
        return [w.to_list_item() for w in self._load_all()]


class InMemoryWorkflowStore(CollectionWorkflowStore):
    """Keeps the collection in process memory. Useful for tests and demos."""

    def __init__(self):
        super().__init__()
        self._documents: List[Dict[str, Any]] = []

    def _read_all(self) -> List[Dict[str, Any]]:
        return json.loads(json.dumps(self._documents))

    def _write_all(self, documents: List[Dict[str, Any]]) -> None:
        self._documents = json.loads(json.dumps(documents))


class JsonFileWorkflowStore(CollectionWorkflowStore):
    """The whole collection as one JSON array on disk, replaced atomically."""

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)

    def _read_all(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Could not read {self.path}: {exc}") from exc
        return data if isinstance(data, list) else []

    def _write_all(self, documents: List[Dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(documents, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc


class RedisWorkflowStore(CollectionWorkflowStore):
    """The whole collection serialised under a single Redis key."""

    def __init__(self, client: "redis.Redis", key: str = "workflows"):
        super().__init__()
        self.client = client
        self.key = key

    @classmethod
    def from_url(cls, url: str, key: str = "workflows") -> "RedisWorkflowStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), key)

    def _read_all(self) -> List[Dict[str, Any]]:
        try:
            raw = self.client.get(self.key)
        except redis.RedisError as exc:
            raise PersistenceError(f"Redis read failed: {exc}") from exc
        if not raw:
            return []
        return json.loads(raw)

    def _write_all(self, documents: List[Dict[str, Any]]) -> None:
        try:
            self.client.set(self.key, json.dumps(documents))
        except redis.RedisError as exc:
            raise PersistenceError(f"Redis write failed: {exc}") from exc
