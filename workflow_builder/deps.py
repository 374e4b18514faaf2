from typing import Optional

from fastapi import Depends

from .config import Settings, get_settings
from .services.factory import StoreFactory
from .services.store import WorkflowStore

_store: Optional[WorkflowStore] = None


def get_store(settings: Settings = Depends(get_settings)) -> WorkflowStore:
    """Process-wide store, created on first use from settings. Tests override this dependency."""
    global _store
    if _store is None:
        _store = StoreFactory.create_store(settings=settings)
    return _store
