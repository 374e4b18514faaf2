"""
Editing session: owns the single in-memory Workflow being edited.

Lifecycle: open() loads the document and arms autosave, every accepted
mutation replaces the document and schedules a save, close() stops the
debounce timer and waits for a save that is already running.
"""

import asyncio
import logging
from typing import Callable, Optional

from ..config import Settings, settings as default_settings
from ..errors import WorkflowNotFound
from ..models import Workflow
from . import mutations
from .autosave import AutosaveController, SaveObserver, SaveStatus
from .drag import DragEvent, apply_drag, apply_keyboard_move
from .store import WorkflowStore

logger = logging.getLogger(__name__)


class EditorSession:
    """
    `store` is anything with the WorkflowStore load/save contract: a store
    instance or a WorkflowApiClient talking to the REST layer.
    """

    def __init__(self, store: WorkflowStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or default_settings
        self.workflow: Optional[Workflow] = None
        self.autosave = AutosaveController(
            persist=self._persist,
            snapshot=lambda: self.workflow,
            delay=self.settings.autosave_delay_seconds,
            enabled=False,
        )

    # --- lifecycle -------------------------------------------------------

    async def open(self, workflow_id: str) -> Workflow:
        workflow = await asyncio.to_thread(self.store.load, workflow_id)
        if workflow is None:
            raise WorkflowNotFound(workflow_id)
        self.workflow = workflow
        self.autosave.enabled = True
        logger.info("opened workflow %s", workflow_id, extra={"workflow_id": workflow_id})
        return workflow

    async def close(self) -> None:
        self.autosave.close()
        await self.autosave.flush()
        self.workflow = None

    @property
    def is_open(self) -> bool:
        return self.workflow is not None

    # --- editing ---------------------------------------------------------

    def apply(self, mutation: Callable[..., Optional[Workflow]], *args, **kwargs) -> bool:
        """
        Run a mutation-engine function against the current document.
        Returns False (and changes nothing) when nothing is open or the
        mutation was a no-op.
        """
        if self.workflow is None:
            return False
        result = mutation(self.workflow, *args, **kwargs)
        if result is None:
            logger.debug("ignored no-op %s", getattr(mutation, "__name__", mutation))
            return False
        self.workflow = result
        self.autosave.schedule()
        return True

    def drag(self, event: DragEvent) -> bool:
        return self.apply(apply_drag, event)

    def keyboard_move(self, item_id: str, offset: int) -> bool:
        return self.apply(apply_keyboard_move, item_id, offset)

    def add_stage(self, name: str, description: str = "", outcomes=None) -> bool:
        return self.apply(
            mutations.add_stage, name, description, outcomes,
            seed_default_task=self.settings.seed_default_task,
        )

    # --- saving ----------------------------------------------------------

    async def save_now(self) -> bool:
        return await self.autosave.save_now()

    def watch(self, observer: SaveObserver) -> None:
        self.autosave.attach(observer)

    @property
    def status(self) -> SaveStatus:
        return self.autosave.status

    async def _persist(self, workflow: Workflow) -> Workflow:
        saved = await asyncio.to_thread(self.store.save, workflow)
        # keep edits made while the save was running; only take the new timestamp
        if self.workflow is not None and self.workflow.id == saved.id:
            self.workflow = self.workflow.model_copy(update={"updated_at": saved.updated_at})
        return saved
