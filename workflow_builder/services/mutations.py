"""
Mutation engine: one pure function per editor action.

Every function takes the current Workflow and returns a new Workflow, or None
when the action cannot apply (an id that does not resolve, a position that
would not change). None is not an error: the caller keeps its current value.
Only required-field violations raise WorkflowValidationError.
"""

from typing import Iterable, List, Optional, Sequence, TypeVar

from ..errors import WorkflowValidationError
from ..models import (
    DEFAULT_OUTCOMES,
    DEFAULT_TASK_TITLE,
    STAGE_PREFIX,
    TASK_PREFIX,
    Stage,
    Task,
    TaskAssignee,
    Workflow,
)
from ..util.ids import new_id

T = TypeVar("T")


# ============================================================================
# Helpers
# ============================================================================

def _move(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    moved = list(items)
    item = moved.pop(old_index)
    moved.insert(new_index, item)
    return moved


def _renumber(stages: Sequence[Stage]) -> List[Stage]:
    """Assign dense zero-based `order` in sequence order."""
    return [
        stage if stage.order == i else stage.model_copy(update={"order": i})
        for i, stage in enumerate(stages)
    ]


def _with_stages(workflow: Workflow, stages: List[Stage]) -> Workflow:
    return workflow.model_copy(update={"stages": stages})


def _replace_stage(workflow: Workflow, index: int, stage: Stage) -> Workflow:
    stages = list(workflow.stages)
    stages[index] = stage
    return _with_stages(workflow, stages)


def _assignee(value) -> str:
    try:
        return TaskAssignee(value).value
    except ValueError:
        allowed = ", ".join(a.value for a in TaskAssignee)
        raise WorkflowValidationError(
            f"Unknown assignee {value!r}",
            [{"path": "assignedTo", "msg": f"must be one of: {allowed}"}],
        ) from None


def clean_outcomes(outcomes: Iterable[str]) -> List[str]:
    """Trim labels, drop blanks and drop duplicates (case-sensitive, first wins)."""
    result: List[str] = []
    for label in outcomes:
        label = label.strip()
        if label and label not in result:
            result.append(label)
    return result


def new_stage_id() -> str:
    return new_id(STAGE_PREFIX)


def new_task_id(stage_id: str) -> str:
    """Task ids carry the creating stage's suffix: task-<stage>-<ulid>."""
    lineage = stage_id[len(STAGE_PREFIX):] if stage_id.startswith(STAGE_PREFIX) else stage_id
    return new_id(f"{TASK_PREFIX}{lineage}-")


def new_task(stage_id: str, title: str = DEFAULT_TASK_TITLE, description: str = "",
             assigned_to=TaskAssignee.client) -> Task:
    return Task(
        id=new_task_id(stage_id),
        title=title,
        description=description,
        assigned_to=_assignee(assigned_to),
    )


# ============================================================================
# Reordering
# ============================================================================

def reorder_stages(workflow: Workflow, moved_stage_id: str, target_index: int) -> Optional[Workflow]:
    """Move a stage to `target_index` and re-dense every stage's order."""
    old_index = workflow.stage_index(moved_stage_id)
    if old_index < 0 or not 0 <= target_index < len(workflow.stages):
        return None
    if old_index == target_index:
        return None
    return _with_stages(workflow, _renumber(_move(workflow.stages, old_index, target_index)))


def reorder_tasks_within_stage(
    workflow: Workflow,
    stage_id: str,
    moved_task_id: str,
    target_index: int,
) -> Optional[Workflow]:
    stage_index = workflow.stage_index(stage_id)
    if stage_index < 0:
        return None
    stage = workflow.stages[stage_index]
    old_index = next((i for i, t in enumerate(stage.tasks) if t.id == moved_task_id), -1)
    if old_index < 0 or not 0 <= target_index < len(stage.tasks):
        return None
    if old_index == target_index:
        return None
    tasks = _move(stage.tasks, old_index, target_index)
    return _replace_stage(workflow, stage_index, stage.model_copy(update={"tasks": tasks}))


def move_task_across_stages(
    workflow: Workflow,
    source_stage_id: str,
    target_stage_id: str,
    task_id: str,
) -> Optional[Workflow]:
    """
    Remove a task from the source stage and append it to the target stage.
    Stage order is untouched; tasks have no cross-stage order.
    """
    source_index = workflow.stage_index(source_stage_id)
    target_index = workflow.stage_index(target_stage_id)
    if source_index < 0 or target_index < 0 or source_index == target_index:
        return None

    source = workflow.stages[source_index]
    task = next((t for t in source.tasks if t.id == task_id), None)
    if task is None:
        return None

    target = workflow.stages[target_index]
    stages = list(workflow.stages)
    stages[source_index] = source.model_copy(
        update={"tasks": [t for t in source.tasks if t.id != task_id]}
    )
    stages[target_index] = target.model_copy(update={"tasks": [*target.tasks, task]})
    return _with_stages(workflow, stages)


# ============================================================================
# Stages
# ============================================================================

def add_stage(
    workflow: Workflow,
    name: str,
    description: str = "",
    outcomes: Optional[Iterable[str]] = None,
    *,
    seed_default_task: bool = False,
) -> Workflow:
    """
    Append a new stage. `outcomes=None` uses the default outcome set;
    `seed_default_task` adds one "New Task" assigned to the client.
    """
    if not name or not name.strip():
        raise WorkflowValidationError.missing_fields(["name"])

    stage_id = new_stage_id()
    stage = Stage(
        id=stage_id,
        name=name.strip(),
        description=description,
        outcomes=clean_outcomes(DEFAULT_OUTCOMES if outcomes is None else outcomes),
        tasks=[new_task(stage_id)] if seed_default_task else [],
        order=len(workflow.stages),
    )
    return _with_stages(workflow, _renumber([*workflow.stages, stage]))


def update_stage(
    workflow: Workflow,
    stage_id: str,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    outcomes: Optional[Iterable[str]] = None,
) -> Optional[Workflow]:
    index = workflow.stage_index(stage_id)
    if index < 0:
        return None

    update = {}
    if name is not None:
        if not name.strip():
            raise WorkflowValidationError.missing_fields(["name"])
        update["name"] = name.strip()
    if description is not None:
        update["description"] = description
    if outcomes is not None:
        update["outcomes"] = clean_outcomes(outcomes)

    stage = workflow.stages[index]
    updated = stage.model_copy(update=update)
    if updated == stage:
        return None
    return _replace_stage(workflow, index, updated)


def delete_stage(workflow: Workflow, stage_id: str) -> Optional[Workflow]:
    if workflow.stage_index(stage_id) < 0:
        return None
    return _with_stages(workflow, _renumber([s for s in workflow.stages if s.id != stage_id]))


def add_outcome(workflow: Workflow, stage_id: str, label: str) -> Optional[Workflow]:
    index = workflow.stage_index(stage_id)
    label = label.strip()
    if index < 0 or not label:
        return None
    stage = workflow.stages[index]
    if label in stage.outcomes:
        return None
    return _replace_stage(
        workflow, index, stage.model_copy(update={"outcomes": [*stage.outcomes, label]})
    )


def remove_outcome(workflow: Workflow, stage_id: str, label: str) -> Optional[Workflow]:
    index = workflow.stage_index(stage_id)
    if index < 0:
        return None
    stage = workflow.stages[index]
    if label not in stage.outcomes:
        return None
    return _replace_stage(
        workflow,
        index,
        stage.model_copy(update={"outcomes": [o for o in stage.outcomes if o != label]}),
    )


# ============================================================================
# Tasks
# ============================================================================

def add_task(
    workflow: Workflow,
    stage_id: str,
    title: str = DEFAULT_TASK_TITLE,
    description: str = "",
    assigned_to=TaskAssignee.client,
) -> Optional[Workflow]:
    index = workflow.stage_index(stage_id)
    if index < 0:
        return None
    stage = workflow.stages[index]
    task = new_task(stage.id, title, description, assigned_to)
    return _replace_stage(workflow, index, stage.model_copy(update={"tasks": [*stage.tasks, task]}))


def update_task(
    workflow: Workflow,
    task_id: str,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    assigned_to=None,
) -> Optional[Workflow]:
    """Merge fields into the task, wherever it currently lives."""
    location = workflow.find_task_owner(task_id)
    if location is None:
        return None
    stage_index, task_index = location

    update = {}
    if title is not None:
        update["title"] = title
    if description is not None:
        update["description"] = description
    if assigned_to is not None:
        update["assigned_to"] = _assignee(assigned_to)

    stage = workflow.stages[stage_index]
    task = stage.tasks[task_index]
    updated = task.model_copy(update=update)
    if updated == task:
        return None
    tasks = list(stage.tasks)
    tasks[task_index] = updated
    return _replace_stage(workflow, stage_index, stage.model_copy(update={"tasks": tasks}))


def delete_task(workflow: Workflow, task_id: str) -> Optional[Workflow]:
    location = workflow.find_task_owner(task_id)
    if location is None:
        return None
    stage_index, _ = location
    stage = workflow.stages[stage_index]
    return _replace_stage(
        workflow,
        stage_index,
        stage.model_copy(update={"tasks": [t for t in stage.tasks if t.id != task_id]}),
    )


# ============================================================================
# Workflow details
# ============================================================================

def update_details(
    workflow: Workflow,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Optional[Workflow]:
    update = {}
    if name is not None and name != workflow.name:
        update["name"] = name
    if description is not None and description != workflow.description:
        update["description"] = description
    if not update:
        return None
    return workflow.model_copy(update=update)
