from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ..deps import get_store
from ..models import Workflow
from ..services.examples import list_examples, load_example
from ..services.store import WorkflowStore
from ..services.transfer import duplicate_workflow

router = APIRouter()


def _example_or_404(slug: str) -> Workflow:
    workflow = load_example(slug)
    if workflow is None:
        raise HTTPException(status_code=404, detail="Example not found")
    return workflow


@router.get("/examples")
def get_examples() -> List[Dict[str, str]]:
    """Catalog of bundled example workflows"""
    return list_examples()


@router.get("/examples/{slug}", response_model=Workflow)
def get_example(slug: str):
    return _example_or_404(slug)


@router.post("/examples/{slug}/duplicate", response_model=Workflow, status_code=status.HTTP_201_CREATED)
def duplicate_example(
    slug: str,
    body: Optional[Dict[str, Any]] = Body(default=None),
    store: WorkflowStore = Depends(get_store),
):
    """Copy an example into the user's workflows under new ids"""
    created_by = (body or {}).get("createdBy") or "User"
    return store.save(duplicate_workflow(_example_or_404(slug), created_by=created_by))
