from sqlmodel import SQLModel, Field


class WorkflowRecord(SQLModel, table=True):
    """
    One row per workflow. Summary columns are kept for list view;
    the ordered stage/task graph is stored as JSON text and always
    overwritten as a whole.
    """
    __tablename__ = "workflows"

    id: str = Field(primary_key=True)
    name: str
    description: str = ""
    created_by: str = ""
    created_at: str  # ISO timestamp
    updated_at: str = Field(index=True)  # ISO timestamp
    stages_json: str = "[]"  # JSON list of stages (export format)
