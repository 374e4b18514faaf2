"""
HTTP client for the workflow REST API.

Implements the same load/save/delete/list contract as the stores, so an
EditorSession can autosave through the API instead of a local store.

    client = WorkflowApiClient("http://localhost:8000")
    session = EditorSession(client)
"""
from typing import Any, Dict, List, Optional

import requests

from .errors import PersistenceError, WorkflowNotFound, WorkflowValidationError
from .models import Workflow, WorkflowListItem
from .services.store import to_document


class WorkflowApiClient:
    """
    `http` is any requests-compatible session object. Tests pass FastAPI's
    TestClient with an empty base_url.
    """

    _DEFAULT_TIMEOUT_SEC = 10

    def __init__(self, base_url: str = "http://localhost:8000", http: Optional[Any] = None,
                 timeout: float = _DEFAULT_TIMEOUT_SEC):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs):
        if isinstance(self.http, requests.Session):
            kwargs.setdefault("timeout", self.timeout)
        try:
            return self.http.request(method, f"{self.base_url}{path}", **kwargs)
        except requests.RequestException as exc:
            raise PersistenceError(f"{method} {path} failed: {exc}") from exc

    @staticmethod
    def _check(resp, workflow_id: Optional[str] = None):
        if resp.status_code == 404 and workflow_id is not None:
            raise WorkflowNotFound(workflow_id)
        if resp.status_code == 400:
            error = resp.json().get("error", {})
            raise WorkflowValidationError(error.get("message", "Invalid request"), error.get("details"))
        if resp.status_code >= 400:
            raise PersistenceError(f"API responded {resp.status_code}: {resp.text[:200]}")
        return resp

    # --- store contract --------------------------------------------------

    def load(self, workflow_id: str) -> Optional[Workflow]:
        resp = self._request("GET", f"/workflows/{workflow_id}")
        if resp.status_code == 404:
            return None
        return Workflow.model_validate(self._check(resp).json())

    def save(self, workflow: Workflow) -> Workflow:
        resp = self._request("PUT", f"/workflows/{workflow.id}", json=to_document(workflow))
        return Workflow.model_validate(self._check(resp, workflow.id).json())

    def delete(self, workflow_id: str) -> bool:
        resp = self._request("DELETE", f"/workflows/{workflow_id}")
        if resp.status_code == 404:
            return False
        self._check(resp)
        return True

    def list(self) -> List[WorkflowListItem]:
        resp = self._check(self._request("GET", "/workflows"))
        return [WorkflowListItem.model_validate(item) for item in resp.json()]

    # --- extra endpoints -------------------------------------------------

    def create(self, name: str, description: str, created_by: str) -> Workflow:
        body = {"name": name, "description": description, "createdBy": created_by}
        resp = self._check(self._request("POST", "/workflows", json=body))
        return Workflow.model_validate(resp.json())

    def import_workflow(self, document: Dict[str, Any]) -> Workflow:
        resp = self._check(self._request("POST", "/workflows/import", json=document))
        return Workflow.model_validate(resp.json())

    def export(self, workflow_id: str) -> Dict[str, Any]:
        resp = self._check(self._request("GET", f"/workflows/{workflow_id}/export"), workflow_id)
        return resp.json()
