"""
Debounced autosave.

AutosaveController wraps an async persist callable and owns the save status:

    idle --(timer fires / save_now)--> saving --ok--> saved
                                     saving --fail--> error

schedule() re-arms a single timer on the running event loop, so a burst of
edits produces one save once the editor has been quiet for `delay` seconds.
At most one save runs at a time; a save is never cancelled once started.
Failed saves are not retried automatically.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..models import Workflow
from ..util.clock import utc_now

logger = logging.getLogger(__name__)

PersistFn = Callable[[Workflow], Awaitable[Any]]
SnapshotFn = Callable[[], Optional[Workflow]]


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


# ============================================================================
# Observers
# ============================================================================

class SaveEvent:
    """A status transition of the controller."""

    def __init__(self, status: SaveStatus, workflow_id: Optional[str] = None,
                 error: Optional[BaseException] = None):
        self.status = status
        self.workflow_id = workflow_id
        self.error = error
        self.timestamp = utc_now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "workflow_id": self.workflow_id,
            "error": str(self.error) if self.error else None,
            "timestamp": self.timestamp,
        }


class SaveObserver(ABC):
    @abstractmethod
    def update(self, event: SaveEvent) -> None:
        """Receives every status transition."""


class LogSaveObserver(SaveObserver):
    """Keeps the transitions in memory and mirrors them to the log."""

    def __init__(self):
        self._events: List[SaveEvent] = []

    def update(self, event: SaveEvent) -> None:
        self._events.append(event)
        logger.debug("autosave %s", event.status.value, extra={"workflow_id": event.workflow_id})

    def statuses(self) -> List[SaveStatus]:
        return [e.status for e in self._events]

    def get_events(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._events]

    def clear(self) -> None:
        self._events.clear()


# ============================================================================
# Controller
# ============================================================================

class AutosaveController:

    def __init__(
        self,
        persist: PersistFn,
        snapshot: SnapshotFn,
        delay: float = 2.0,
        enabled: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._persist = persist
        self._snapshot = snapshot
        self._clock = clock
        self.delay = delay
        self.enabled = enabled

        self.status = SaveStatus.IDLE
        self.last_saved: Optional[datetime] = None
        self.error: Optional[Exception] = None

        self._observers: List[SaveObserver] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: Optional[asyncio.Task] = None
        # a debounced save was dropped because another one was running
        self._resave = False

    # --- observers -------------------------------------------------------

    def attach(self, observer: SaveObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def detach(self, observer: SaveObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _set_status(self, status: SaveStatus, workflow_id: Optional[str] = None,
                    error: Optional[Exception] = None) -> None:
        self.status = status
        event = SaveEvent(status, workflow_id, error)
        for observer in self._observers:
            observer.update(event)

    # --- state -----------------------------------------------------------

    @property
    def is_saving(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def pending(self) -> bool:
        """A debounce timer is armed and has not fired yet."""
        return self._timer is not None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # --- triggers --------------------------------------------------------

    def schedule(self) -> None:
        """Record a change: (re)start the debounce timer. Must run inside the event loop."""
        if not self.enabled:
            return
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        if self.status is SaveStatus.SAVED:
            self._set_status(SaveStatus.IDLE)
        self._timer = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        if not self.enabled:
            return
        if self.is_saving:
            logger.debug("autosave skipped: a save is already in flight")
            self._resave = True
            return
        self._in_flight = asyncio.ensure_future(self._run_save())

    async def save_now(self) -> bool:
        """
        Manual save: skips the debounce delay but not the one-save-at-a-time rule.
        Returns True when a save ran and succeeded.
        """
        if not self.enabled or self.is_saving:
            return False
        self._cancel_timer()
        self._in_flight = asyncio.ensure_future(self._run_save())
        return await asyncio.shield(self._in_flight)

    async def flush(self) -> None:
        """Wait for the save in flight, if any."""
        if self._in_flight is not None:
            await asyncio.shield(self._in_flight)

    def close(self) -> None:
        """Stop scheduling. A save already running is left to finish."""
        self._cancel_timer()
        self.enabled = False

    # --- execution -------------------------------------------------------

    async def _run_save(self) -> bool:
        workflow = self._snapshot()
        if workflow is None:
            return False

        self._resave = False
        self._set_status(SaveStatus.SAVING, workflow.id)
        try:
            await self._persist(workflow)
        except Exception as exc:
            self.error = exc
            logger.error("autosave failed for workflow %s", workflow.id, exc_info=exc,
                         extra={"workflow_id": workflow.id})
            self._set_status(SaveStatus.ERROR, workflow.id, exc)
            return False

        self.error = None
        self.last_saved = self._clock()
        self._set_status(SaveStatus.SAVED, workflow.id)

        if self._resave:
            self._resave = False
            self.schedule()
        return True
