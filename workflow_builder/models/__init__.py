from .workflow import (
    DEFAULT_OUTCOMES,
    DEFAULT_TASK_TITLE,
    STAGE_PREFIX,
    TASK_PREFIX,
    WORKFLOW_PREFIX,
    CreateWorkflowDTO,
    Stage,
    Task,
    TaskAssignee,
    Workflow,
    WorkflowListItem,
)
from .table import WorkflowRecord

__all__ = [
    "DEFAULT_OUTCOMES", "DEFAULT_TASK_TITLE",
    "STAGE_PREFIX", "TASK_PREFIX", "WORKFLOW_PREFIX",
    "CreateWorkflowDTO",
    "Stage", "Task", "TaskAssignee",
    "Workflow", "WorkflowListItem",
    "WorkflowRecord",
]
