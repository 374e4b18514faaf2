import re

_UNSAFE = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)


def export_filename(name: str) -> str:
    """
    Download name for an exported workflow:
        "Annual Review 2024" -> "annual_review_2024.json"
    """
    return f"{_UNSAFE.sub('_', name).lower()}.json"
