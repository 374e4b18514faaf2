"""
Drag-reorder coordinator.

Turns a finished drag gesture (dragged item id + drop target id) into a call
to the mutation engine. Item kind comes from the id prefix; the stage that
owns a task is always looked up in the workflow, never parsed out of the id,
because a task keeps its id when it moves to another stage.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import STAGE_PREFIX, TASK_PREFIX, Workflow
from . import mutations


class ItemKind(str, Enum):
    stage = "stage"
    task = "task"


def item_kind(item_id: Optional[str]) -> Optional[ItemKind]:
    if not item_id:
        return None
    if item_id.startswith(STAGE_PREFIX):
        return ItemKind.stage
    if item_id.startswith(TASK_PREFIX):
        return ItemKind.task
    return None


@dataclass(frozen=True)
class DragEvent:
    """End of a pointer or keyboard drag: `over_id` is None when dropped on nothing."""
    active_id: str
    over_id: Optional[str] = None


def apply_drag(workflow: Workflow, event: DragEvent) -> Optional[Workflow]:
    """
    Dispatch a drop:
        stage on stage                -> reorder_stages
        task on task, same stage      -> reorder_tasks_within_stage
        task on task, other stage     -> move_task_across_stages
    Anything else (cross-kind, unknown ids, no target) is a no-op.
    """
    active_kind = item_kind(event.active_id)
    if active_kind is None or active_kind != item_kind(event.over_id):
        return None

    if active_kind is ItemKind.stage:
        target_index = workflow.stage_index(event.over_id)
        if target_index < 0:
            return None
        return mutations.reorder_stages(workflow, event.active_id, target_index)

    source = workflow.find_task_owner(event.active_id)
    target = workflow.find_task_owner(event.over_id)
    if source is None or target is None:
        return None

    source_stage = workflow.stages[source[0]]
    target_stage = workflow.stages[target[0]]
    if source_stage.id == target_stage.id:
        return mutations.reorder_tasks_within_stage(
            workflow, source_stage.id, event.active_id, target[1]
        )
    return mutations.move_task_across_stages(
        workflow, source_stage.id, target_stage.id, event.active_id
    )


def apply_keyboard_move(workflow: Workflow, item_id: str, offset: int) -> Optional[Workflow]:
    """Move a stage or task `offset` places within its own list, clamped to the ends."""
    kind = item_kind(item_id)

    if kind is ItemKind.stage:
        index = workflow.stage_index(item_id)
        if index < 0:
            return None
        target = max(0, min(len(workflow.stages) - 1, index + offset))
        return mutations.reorder_stages(workflow, item_id, target)

    if kind is ItemKind.task:
        location = workflow.find_task_owner(item_id)
        if location is None:
            return None
        stage = workflow.stages[location[0]]
        target = max(0, min(len(stage.tasks) - 1, location[1] + offset))
        return mutations.reorder_tasks_within_stage(workflow, stage.id, item_id, target)

    return None
