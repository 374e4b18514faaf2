"""Read-only example templates bundled with the package (workflow_builder/templates/*.json)."""

import json
from importlib import resources
from typing import Any, Dict, List, Optional

from ..models import Workflow

TEMPLATE_PACKAGE = "workflow_builder.templates"


def _template_files() -> Dict[str, Any]:
    root = resources.files(TEMPLATE_PACKAGE)
    return {
        entry.name[: -len(".json")]: entry
        for entry in root.iterdir()
        if entry.name.endswith(".json")
    }


def list_examples() -> List[Dict[str, str]]:
    examples = []
    for slug, entry in sorted(_template_files().items()):
        workflow = Workflow.model_validate(json.loads(entry.read_text(encoding="utf-8")))
        examples.append({"slug": slug, "name": workflow.name, "description": workflow.description})
    return examples


def load_example(slug: str) -> Optional[Workflow]:
    entry = _template_files().get(slug)
    if entry is None:
        return None
    return Workflow.model_validate(json.loads(entry.read_text(encoding="utf-8")))
