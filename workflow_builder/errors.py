"""
Error taxonomy shared by the editor core, the stores and the HTTP layer.

In-memory mutations never raise for ids that do not resolve; they return None.
Only required-field violations and persistence failures are exceptions.
"""
from typing import Any, Dict, List, Optional


class WorkflowBuilderError(Exception):
    """Base class for every error raised by this package."""

    code = "INTERNAL"

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class WorkflowNotFound(WorkflowBuilderError):
    code = "NOT_FOUND"

    def __init__(self, workflow_id: str):
        super().__init__("Workflow not found", [{"path": "id", "msg": workflow_id}])
        self.workflow_id = workflow_id


class WorkflowValidationError(WorkflowBuilderError):
    """A required field is missing or blank."""

    code = "VALIDATION"

    @classmethod
    def missing_fields(cls, fields: List[str]) -> "WorkflowValidationError":
        return cls(
            f"Missing required fields: {', '.join(fields)}",
            [{"path": f, "msg": "required"} for f in fields],
        )


class PersistenceError(WorkflowBuilderError):
    """The backing store could not be read or written."""

    code = "PERSISTENCE"
