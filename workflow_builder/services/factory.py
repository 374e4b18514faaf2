"""
Factory Pattern: creation of the persistence backend.

The backend is picked from Settings.store_backend (WORKFLOW_BUILDER_STORE_BACKEND).
"""
import logging
from pathlib import Path
from typing import Optional

from sqlmodel import create_engine

from ..config import Settings, settings as default_settings
from .sql_store import SQLWorkflowStore
from .store import (
    InMemoryWorkflowStore,
    JsonFileWorkflowStore,
    RedisWorkflowStore,
    WorkflowStore,
)

logger = logging.getLogger(__name__)


class StoreFactory:
    """Builds a WorkflowStore for the configured backend."""

    @staticmethod
    def create_store(backend: Optional[str] = None, settings: Optional[Settings] = None) -> WorkflowStore:
        """
        Args:
            backend: "sql", "file", "redis" or "memory". None reads it from settings.
            settings: configuration to read paths/urls from (default: module settings)

        Raises:
            ValueError: unknown backend name
        """
        settings = settings or default_settings
        backend = (backend or settings.store_backend).lower()

        if backend == "memory":
            store: WorkflowStore = InMemoryWorkflowStore()

        elif backend == "file":
            store = JsonFileWorkflowStore(settings.data_file)

        elif backend == "redis":
            store = RedisWorkflowStore.from_url(settings.redis_url, settings.redis_key)

        elif backend == "sql":
            url = settings.database_url
            connect_args = {}
            if url.startswith("sqlite"):
                connect_args["check_same_thread"] = False
                db_path = url.split("///", 1)[-1]
                if db_path and db_path != ":memory:" and "///" in url:
                    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(url, connect_args=connect_args, echo=False)
            store = SQLWorkflowStore(engine)
            store.create_schema()

        else:
            raise ValueError(
                f"Unknown store backend: {backend}. "
                f"Valid backends: {', '.join(StoreFactory.get_available_backends())}"
            )

        logger.info("using %s workflow store", backend)
        return store

    @staticmethod
    def get_available_backends() -> list[str]:
        return ["sql", "file", "redis", "memory"]
