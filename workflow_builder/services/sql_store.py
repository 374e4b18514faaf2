"""
SQL persistence (SQLModel).
One row per workflow; the stage/task graph is stored as JSON text and
overwritten as a whole on every save.
"""

import json
import logging
from typing import List, Optional

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from ..errors import PersistenceError
from ..models import Stage, Workflow, WorkflowListItem, WorkflowRecord
from .store import WorkflowStore, stamp

logger = logging.getLogger(__name__)


class SQLWorkflowStore(WorkflowStore):
    """Repository for workflow documents backed by a SQL database"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def create_schema(self):
        """Create all database tables"""
        SQLModel.metadata.create_all(self.engine)

    @staticmethod
    def _to_workflow(record: WorkflowRecord) -> Workflow:
        return Workflow(
            id=record.id,
            name=record.name,
            description=record.description,
            created_by=record.created_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
            stages=[Stage.model_validate(s) for s in json.loads(record.stages_json)],
        )

    @staticmethod
    def _stages_json(workflow: Workflow) -> str:
        return json.dumps([s.model_dump(mode="json", by_alias=True) for s in workflow.stages])

    def load(self, workflow_id: str) -> Optional[Workflow]:
        try:
            with Session(self.engine) as session:
                record = session.get(WorkflowRecord, workflow_id)
                return self._to_workflow(record) if record else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load workflow {workflow_id}: {exc}") from exc

    def save(self, workflow: Workflow) -> Workflow:
        try:
            with Session(self.engine) as session:
                record = session.get(WorkflowRecord, workflow.id)
                previous = self._to_workflow(record) if record else None
                stored = stamp(workflow, previous)

                if record is None:
                    record = WorkflowRecord(id=stored.id, created_at=stored.created_at,
                                            updated_at=stored.updated_at, name=stored.name)
                record.name = stored.name
                record.description = stored.description
                record.created_by = stored.created_by
                record.created_at = stored.created_at
                record.updated_at = stored.updated_at
                record.stages_json = self._stages_json(stored)

                session.add(record)
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not save workflow {workflow.id}: {exc}") from exc

        logger.debug("saved workflow %s", stored.id)
        return stored

    def delete(self, workflow_id: str) -> bool:
        try:
            with Session(self.engine) as session:
                record = session.get(WorkflowRecord, workflow_id)
                if not record:
                    return False
                session.delete(record)
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not delete workflow {workflow_id}: {exc}") from exc
        return True

    def list(self) -> List[WorkflowListItem]:
        """List all workflows, oldest first"""
        try:
            with Session(self.engine) as session:
                records = session.exec(
                    select(WorkflowRecord).order_by(WorkflowRecord.created_at)
                ).all()
                return [
                    WorkflowListItem(
                        id=r.id,
                        name=r.name,
                        description=r.description,
                        created_by=r.created_by,
                        created_at=r.created_at,
                        updated_at=r.updated_at,
                    )
                    for r in records
                ]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not list workflows: {exc}") from exc
