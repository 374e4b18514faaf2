# tests/test_session.py
import asyncio

import pytest

from workflow_builder.config import Settings
from workflow_builder.errors import WorkflowNotFound
from workflow_builder.services import mutations
from workflow_builder.services.autosave import LogSaveObserver, SaveStatus
from workflow_builder.services.drag import DragEvent
from workflow_builder.services.session import EditorSession

DELAY = 0.05


@pytest.fixture()
def settings():
    return Settings(autosave_delay_seconds=DELAY, seed_default_task=False)


@pytest.fixture()
def saved_workflow(store, make_workflow):
    return store.save(make_workflow())


@pytest.mark.asyncio
async def test_open_unknown_workflow_raises(store, settings):
    session = EditorSession(store, settings)
    with pytest.raises(WorkflowNotFound):
        await session.open("wf_missing")
    assert not session.is_open


@pytest.mark.asyncio
async def test_edits_before_open_are_ignored(store, settings):
    session = EditorSession(store, settings)
    assert session.apply(mutations.add_stage, "Intro") is False
    assert session.status is SaveStatus.IDLE


@pytest.mark.asyncio
async def test_accepted_mutation_is_autosaved(store, settings, saved_workflow):
    session = EditorSession(store, settings)
    await session.open(saved_workflow.id)

    assert session.drag(DragEvent("stage-A", "stage-C")) is True
    assert session.apply(mutations.update_task, "task-B-1", title="Collect documents") is True
    await asyncio.sleep(DELAY * 4)
    await session.autosave.flush()

    stored = store.load(saved_workflow.id)
    assert [s.id for s in stored.stages] == ["stage-B", "stage-C", "stage-A"]
    assert stored.find_stage("stage-B").tasks[0].title == "Collect documents"
    assert session.status is SaveStatus.SAVED
    assert session.workflow.updated_at == stored.updated_at
    await session.close()


@pytest.mark.asyncio
async def test_noop_mutation_does_not_schedule(store, settings, saved_workflow):
    session = EditorSession(store, settings)
    await session.open(saved_workflow.id)
    before = session.workflow

    assert session.drag(DragEvent("task-A-1", "stage-B")) is False
    assert session.apply(mutations.reorder_stages, "stage-A", 0) is False
    assert session.workflow is before
    assert not session.autosave.pending
    await session.close()


@pytest.mark.asyncio
async def test_add_stage_follows_seed_setting(store, saved_workflow):
    session = EditorSession(store, Settings(autosave_delay_seconds=DELAY, seed_default_task=True))
    await session.open(saved_workflow.id)

    assert session.add_stage("Wrap-up") is True
    assert len(session.workflow.stages[-1].tasks) == 1
    await session.close()


@pytest.mark.asyncio
async def test_close_drops_pending_save(store, settings, saved_workflow):
    session = EditorSession(store, settings)
    await session.open(saved_workflow.id)
    session.apply(mutations.update_details, name="Never saved")

    await session.close()
    await asyncio.sleep(DELAY * 4)

    assert store.load(saved_workflow.id).name == saved_workflow.name
    assert session.workflow is None


@pytest.mark.asyncio
async def test_manual_save(store, settings, saved_workflow):
    session = EditorSession(store, settings)
    await session.open(saved_workflow.id)
    session.apply(mutations.delete_stage, "stage-B")

    assert await session.save_now() is True
    stored = store.load(saved_workflow.id)
    assert [s.order for s in stored.stages] == [0, 1]
    await session.close()


@pytest.mark.asyncio
async def test_keyboard_move_is_saved_and_reported_to_watchers(store, settings, saved_workflow):
    session = EditorSession(store, settings)
    observer = LogSaveObserver()
    session.watch(observer)
    await session.open(saved_workflow.id)

    assert session.keyboard_move("task-A-2", -1) is True
    assert session.keyboard_move("stage-C", 1) is False
    assert await session.save_now() is True

    stored = store.load(saved_workflow.id)
    assert [t.id for t in stored.stages[0].tasks] == ["task-A-2", "task-A-1"]
    events = observer.get_events()
    assert [e["status"] for e in events] == ["saving", "saved"]
    assert events[-1]["workflow_id"] == saved_workflow.id

    observer.clear()
    session.autosave.detach(observer)
    session.apply(mutations.update_details, name="Renamed")
    assert await session.save_now() is True
    assert observer.get_events() == []
    await session.close()
