import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..deps import get_store
from ..models import CreateWorkflowDTO, Workflow, WorkflowListItem
from ..services.store import WorkflowStore, to_document
from ..services.transfer import (
    create_workflow as build_workflow,
    export_workflow as render_export,
    import_workflow as build_import,
    new_workflow_id,
    parse_workflow,
)
from ..util.clock import utc_now_iso
from ..util.filenames import export_filename

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_or_404(store: WorkflowStore, workflow_id: str) -> Workflow:
    workflow = store.load(workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow


@router.get("/workflows", response_model=List[WorkflowListItem])
def list_workflows(store: WorkflowStore = Depends(get_store)):
    """Get list of all workflows"""
    return store.list()


@router.post("/workflows", response_model=Workflow, status_code=status.HTTP_201_CREATED)
def create_workflow(body: Dict[str, Any], store: WorkflowStore = Depends(get_store)):
    """
    Create a workflow.
    - `{name, description, createdBy}` creates an empty workflow (all three required)
    - a full workflow (`id` + `stages`) is stored as a duplicate with fresh timestamps
    """
    if body.get("id") and body.get("stages") is not None:
        now = utc_now_iso()
        workflow = parse_workflow({**body, "createdAt": now, "updatedAt": now})
        if store.exists(workflow.id):
            workflow = workflow.model_copy(update={"id": new_workflow_id()})
    else:
        workflow = build_workflow(CreateWorkflowDTO.model_validate(body))

    saved = store.save(workflow)
    logger.info("created workflow %s", saved.id, extra={"workflow_id": saved.id})
    return saved


@router.post("/workflows/import", response_model=Workflow, status_code=status.HTTP_201_CREATED)
def import_workflow(body: Dict[str, Any], store: WorkflowStore = Depends(get_store)):
    """Import an exported workflow JSON document under new ids"""
    saved = store.save(build_import(body))
    logger.info("imported workflow %s", saved.id, extra={"workflow_id": saved.id})
    return saved


@router.get("/workflows/{id}", response_model=Workflow)
def get_workflow(id: str, store: WorkflowStore = Depends(get_store)):
    """Get workflow by ID with stages and tasks"""
    return _get_or_404(store, id)


@router.put("/workflows/{id}", response_model=Workflow)
def update_workflow(id: str, body: Dict[str, Any], store: WorkflowStore = Depends(get_store)):
    """Merge the body over the stored workflow and overwrite it. The id never changes."""
    existing = _get_or_404(store, id)
    workflow = parse_workflow({**to_document(existing), **body, "id": id})
    return store.save(workflow)


@router.delete("/workflows/{id}")
def delete_workflow(id: str, store: WorkflowStore = Depends(get_store)):
    """Delete workflow"""
    if not store.delete(id):
        raise HTTPException(status_code=404, detail="Workflow not found")
    logger.info("deleted workflow %s", id, extra={"workflow_id": id})
    return {"message": "Workflow deleted successfully"}


@router.get("/workflows/{id}/export")
def export_workflow(id: str, store: WorkflowStore = Depends(get_store)):
    """Download the workflow as a JSON file"""
    workflow = _get_or_404(store, id)
    return Response(
        content=render_export(workflow),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(workflow.name)}"'},
    )
