# tests/conftest.py
from typing import Sequence

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from workflow_builder.deps import get_store
from workflow_builder.main import app
from workflow_builder.models import Stage, Task, Workflow
from workflow_builder.services.sql_store import SQLWorkflowStore
from workflow_builder.services.store import InMemoryWorkflowStore


@pytest.fixture()
def store():
    return InMemoryWorkflowStore()


@pytest.fixture()
def client(store):
    """Test client for the app, wired to a fresh in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def engine():
    # "sqlite://" + StaticPool keeps ONE in-memory connection alive for the whole test
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture()
def sql_store(engine):
    s = SQLWorkflowStore(engine)
    s.create_schema()
    return s


@pytest.fixture()
def make_workflow():
    """
    Build a workflow whose stages are named after `stage_names`:
    stage ids are "stage-<name>", task ids "task-<name>-<n>".
    """
    def _make(stage_names: Sequence[str] = ("A", "B", "C"), tasks_per_stage: int = 2,
              workflow_id: str = "wf_test") -> Workflow:
        stages = [
            Stage(
                id=f"stage-{name}",
                name=name,
                description=f"stage {name}",
                outcomes=["Complete", "Failed"],
                order=i,
                tasks=[
                    Task(id=f"task-{name}-{n}", title=f"{name}{n}", assigned_to="advisor")
                    for n in range(1, tasks_per_stage + 1)
                ],
            )
            for i, name in enumerate(stage_names)
        ]
        return Workflow(
            id=workflow_id,
            name="Client Onboarding",
            description="Steps to onboard a client",
            created_by="tester",
            created_at="2024-01-01T00:00:00+00:00",
            updated_at="2024-01-01T00:00:00+00:00",
            stages=stages,
        )

    return _make
