"""
Document model: Workflow -> ordered Stages -> ordered Tasks.

Values are frozen; every edit produces a new Workflow via model_copy(update=...).
Field names serialise in camelCase (createdBy, assignedTo, ...), which is also
the import/export file format.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

STAGE_PREFIX = "stage-"
TASK_PREFIX = "task-"
WORKFLOW_PREFIX = "wf_"

DEFAULT_OUTCOMES = ["Complete", "Failed"]
DEFAULT_TASK_TITLE = "New Task"


class DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=True,
    )


class TaskAssignee(str, Enum):
    client = "client"
    advisor = "advisor"
    administrator = "administrator"
    power_planner = "power planner"


class Task(DocumentModel):
    id: str
    title: str = ""
    description: str = ""
    assigned_to: TaskAssignee = TaskAssignee.client


class Stage(DocumentModel):
    id: str
    name: str
    description: str = ""
    outcomes: List[str] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    order: int = 0


class Workflow(DocumentModel):
    id: str
    name: str
    description: str
    created_by: str
    created_at: str
    updated_at: str
    stages: List[Stage] = Field(default_factory=list)

    def stage_index(self, stage_id: str) -> int:
        """Position of `stage_id` among the stages, -1 when absent."""
        for i, stage in enumerate(self.stages):
            if stage.id == stage_id:
                return i
        return -1

    def find_stage(self, stage_id: str) -> Optional[Stage]:
        i = self.stage_index(stage_id)
        return self.stages[i] if i >= 0 else None

    def find_task_owner(self, task_id: str) -> Optional[Tuple[int, int]]:
        """(stage index, task index) of the stage currently holding `task_id`."""
        for si, stage in enumerate(self.stages):
            for ti, task in enumerate(stage.tasks):
                if task.id == task_id:
                    return si, ti
        return None

    def task_count(self) -> int:
        return sum(len(s.tasks) for s in self.stages)

    def to_list_item(self) -> "WorkflowListItem":
        return WorkflowListItem(
            id=self.id,
            name=self.name,
            description=self.description,
            created_by=self.created_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class WorkflowListItem(DocumentModel):
    """Workflow summary for list view"""
    id: str
    name: str
    description: str
    created_by: str
    created_at: str
    updated_at: str


# --- API DTOs ---

class CreateWorkflowDTO(DocumentModel):
    """Basic creation request; all fields are required and non-blank."""
    name: str = ""
    description: str = ""
    created_by: str = ""

    def missing_fields(self) -> List[str]:
        return [
            field
            for field, value in (
                ("name", self.name),
                ("description", self.description),
                ("createdBy", self.created_by),
            )
            if not value.strip()
        ]
