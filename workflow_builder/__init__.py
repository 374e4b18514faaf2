"""Workflow template builder: editable stage/task documents with autosave and a REST API."""

__version__ = "1.0.0"
