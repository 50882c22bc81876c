"""
capopt_platform.canvas.quality

Content quality checks for canvas sections (duplicates and incomplete items).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from capopt_platform.canvas.sections import SECTIONS, item_title


def _text(item: Any, name: str) -> str:
    raw = item.get(name) if isinstance(item, Mapping) else getattr(item, name, None)
    return "" if raw is None else str(raw)


def validate_content_quality(sections: Mapping[str, Sequence[Any]] | Any) -> list[str]:
    """
    Return human-readable issues for the given sections.

    `sections` is either a mapping keyed by section attribute (`value_propositions`, ...) or an
    object exposing those attributes, such as a loaded `BusinessCanvas`.
    """

    def items_for(attr: str) -> Sequence[Any]:
        if isinstance(sections, Mapping):
            return sections.get(attr) or ()
        return getattr(sections, attr, None) or ()

    issues: list[str] = []

    for spec in SECTIONS:
        seen: set[str] = set()
        duplicates: list[str] = []
        for item in items_for(spec.attr):
            title = item_title(spec, item).strip().lower()
            if not title:
                continue
            if title in seen and title not in duplicates:
                duplicates.append(title)
            seen.add(title)
        if duplicates:
            issues.append(f"Duplicate titles found in {spec.attr}: {', '.join(duplicates)}")

    for spec in SECTIONS:
        for index, item in enumerate(items_for(spec.attr)):
            if not item_title(spec, item).strip():
                issues.append(f"{spec.attr}[{index}]: Missing title")
            if spec.has_description and not _text(item, "description").strip():
                issues.append(f"{spec.attr}[{index}]: Missing description")

    return issues


# --- Module Notes -----------------------------------------------------------
# Accepts both ORM rows and plain dicts so the same checks run on stored canvases and
# on section payloads before they are persisted.
