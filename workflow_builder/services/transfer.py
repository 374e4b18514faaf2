"""
Creation, import, export and duplication of whole workflows.

Import and duplication give the new document fresh workflow, stage and task
ids so it can live next to its source without collisions; content and
structure are kept as they are.
"""

import json
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..errors import WorkflowValidationError
from ..models import WORKFLOW_PREFIX, CreateWorkflowDTO, Stage, Workflow
from ..util.clock import utc_now_iso
from ..util.ids import new_id
from .mutations import new_stage_id, new_task_id
from .store import to_document

REQUIRED_FIELDS = ("name", "description", "createdBy")


def new_workflow_id() -> str:
    return new_id(WORKFLOW_PREFIX)


def parse_workflow(data: Mapping[str, Any]) -> Workflow:
    """Validate a JSON document into a Workflow; shape errors become WorkflowValidationError."""
    try:
        return Workflow.model_validate(data)
    except ValidationError as exc:
        details = [
            {"path": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        raise WorkflowValidationError("Invalid workflow format", details) from exc


def create_workflow(data: CreateWorkflowDTO) -> Workflow:
    """A new, empty workflow. name, description and createdBy are required."""
    missing = data.missing_fields()
    if missing:
        raise WorkflowValidationError.missing_fields(missing)
    now = utc_now_iso()
    return Workflow(
        id=new_workflow_id(),
        name=data.name,
        description=data.description,
        created_by=data.created_by,
        created_at=now,
        updated_at=now,
        stages=[],
    )


def regenerate_ids(workflow: Workflow) -> Workflow:
    """Same structure and content, every stage and task id replaced."""
    stages: List[Stage] = []
    for stage in workflow.stages:
        stage_id = new_stage_id()
        tasks = [t.model_copy(update={"id": new_task_id(stage_id)}) for t in stage.tasks]
        stages.append(stage.model_copy(update={"id": stage_id, "tasks": tasks}))
    return workflow.model_copy(update={"stages": stages})


def _order_key(raw: Mapping[str, Any], index: int):
    order = raw.get("order")
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        order = index
    return (order, index)


def import_workflow(body: Mapping[str, Any]) -> Workflow:
    """
    Build a new workflow from an exported JSON document.

    - name, description and createdBy must be present and non-blank
    - workflow, stage and task ids are regenerated
    - stages without `order` take their list position; the result is
      sorted by order and renumbered 0..N-1
    """
    missing = [
        field for field in REQUIRED_FIELDS
        if not isinstance(body.get(field), str) or not body[field].strip()
    ]
    if missing:
        raise WorkflowValidationError(
            "Invalid workflow format. Missing required fields: " + ", ".join(missing),
            [{"path": f, "msg": "required"} for f in missing],
        )

    raw_stages = body.get("stages") or []
    if not isinstance(raw_stages, list) or not all(isinstance(s, dict) for s in raw_stages):
        raise WorkflowValidationError("Invalid workflow format", [{"path": "stages", "msg": "must be a list of objects"}])
    for i, raw in enumerate(raw_stages):
        if not isinstance(raw.get("tasks") or [], list):
            raise WorkflowValidationError(
                "Invalid workflow format", [{"path": f"stages.{i}.tasks", "msg": "must be a list"}]
            )

    indexed = sorted(
        ((_order_key(raw, i), raw) for i, raw in enumerate(raw_stages)),
        key=lambda pair: pair[0],
    )
    stages: List[Dict[str, Any]] = []
    for order, (_, raw) in enumerate(indexed):
        stage_id = new_stage_id()
        tasks = raw.get("tasks") or []
        stages.append({
            **raw,
            "id": stage_id,
            "order": order,
            "tasks": [
                {**t, "id": new_task_id(stage_id)} if isinstance(t, dict) else t
                for t in tasks
            ],
        })

    now = utc_now_iso()
    return parse_workflow({
        **body,
        "id": new_workflow_id(),
        "createdAt": now,
        "updatedAt": now,
        "stages": stages,
    })


def export_workflow(workflow: Workflow) -> str:
    """Pretty-printed JSON in the import/export file format."""
    return json.dumps(to_document(workflow), indent=2, ensure_ascii=False)


def duplicate_workflow(workflow: Workflow, created_by: str = "User",
                       name: Optional[str] = None) -> Workflow:
    """Copy of `workflow` under a new id, named "<name> (Copy)" unless `name` is given."""
    now = utc_now_iso()
    copy = workflow.model_copy(
        update={
            "id": new_workflow_id(),
            "name": name if name is not None else f"{workflow.name} (Copy)",
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
    )
    return regenerate_ids(copy)
