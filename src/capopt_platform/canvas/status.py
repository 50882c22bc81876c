"""
capopt_platform.canvas.status

Canvas status workflow rules.

Responsibilities:
- Role-based permission matrix for DRAFT/REVIEW/PUBLISHED/ARCHIVED transitions.
- Completeness checks (mandatory fields, minimum section counts) for a requested target status.
- Display metadata for statuses.

Everything here is pure and synchronous: callers pass a canvas (ORM row or mapping) plus
pre-computed section counts, and get back a `CanvasValidationResult`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from capopt_platform.db.models import CanvasStatus, UserRole

_DRAFT = CanvasStatus.draft.value
_REVIEW = CanvasStatus.review.value
_PUBLISHED = CanvasStatus.published.value
_ARCHIVED = CanvasStatus.archived.value

# role -> current status -> permitted targets. Roles not listed have no transitions.
STATUS_PERMISSIONS: dict[str, dict[str, tuple[str, ...]]] = {
    UserRole.admin.value: {
        _DRAFT: (_REVIEW, _ARCHIVED),
        _REVIEW: (_DRAFT, _PUBLISHED, _ARCHIVED),
        _PUBLISHED: (_REVIEW, _ARCHIVED),
        _ARCHIVED: (_DRAFT, _REVIEW, _PUBLISHED),
    },
    UserRole.manager.value: {
        _DRAFT: (_REVIEW, _ARCHIVED),
        _REVIEW: (_DRAFT, _PUBLISHED, _ARCHIVED),
        _PUBLISHED: (_REVIEW, _ARCHIVED),
        _ARCHIVED: (_DRAFT, _REVIEW),
    },
    UserRole.user.value: {
        _DRAFT: (_REVIEW,),
        _REVIEW: (_DRAFT,),
        _PUBLISHED: (_REVIEW,),
        _ARCHIVED: (),
    },
}

REVIEW_MANDATORY_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Canvas Name"),
    ("description", "Description"),
    ("industry", "Industry"),
    ("sector", "Sector"),
    ("business_type", "Business Type"),
)

# (count key, minimum, label), in display order.
REVIEW_MINIMUM_COUNTS: tuple[tuple[str, int, str], ...] = (
    ("value_propositions", 3, "Value Propositions"),
    ("customer_segments", 2, "Customer Segments"),
    ("revenue_streams", 2, "Revenue Streams"),
    ("partnerships", 2, "Key Partnerships"),
    ("resources", 3, "Key Resources"),
    ("activities", 3, "Key Activities"),
    ("cost_structures", 2, "Cost Structures"),
    ("channels", 2, "Channels"),
)

PUBLISHED_MANDATORY_FIELDS: tuple[tuple[str, str], ...] = (
    ("strategic_objective", "Strategic Objective"),
    ("value_proposition", "Value Proposition"),
    ("risk_profile", "Risk Profile"),
    ("digital_maturity", "Digital Maturity Level"),
    ("compliance_requirements", "Compliance Requirements"),
)

STATUS_INFO: dict[str, dict[str, str]] = {
    _DRAFT: {
        "label": "Draft",
        "description": "Initial state for new or incomplete canvases",
        "icon": "FileText",
    },
    _REVIEW: {
        "label": "Review",
        "description": "Canvas under review or approval process",
        "icon": "Clock",
    },
    _PUBLISHED: {
        "label": "Published",
        "description": "Approved and active canvas",
        "icon": "CheckCircle",
    },
    _ARCHIVED: {
        "label": "Archived",
        "description": "Retired or inactive canvas",
        "icon": "Archive",
    },
}


@dataclass(frozen=True, slots=True)
class CanvasContentCounts:
    value_propositions: int = 0
    customer_segments: int = 0
    revenue_streams: int = 0
    partnerships: int = 0
    resources: int = 0
    activities: int = 0
    cost_structures: int = 0
    channels: int = 0

    @classmethod
    def from_canvas(cls, canvas: Any) -> CanvasContentCounts:
        """Count loaded section items on an ORM canvas (or a mapping of section lists)."""
        return cls(**{key: len(_value(canvas, key) or ()) for key, _, _ in REVIEW_MINIMUM_COUNTS})


@dataclass(slots=True)
class CanvasValidationResult:
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    missing_fields: list[str] = field(default_factory=list)
    content_issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _value(canvas: Any, name: str) -> Any:
    if isinstance(canvas, Mapping):
        return canvas.get(name)
    return getattr(canvas, name, None)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def _as_str(value: Any) -> str:
    # StrEnum members compare equal to their values; plain strings pass through.
    return str(getattr(value, "value", value))


def available_transitions(role: str, current_status: str) -> list[str]:
    return list(STATUS_PERMISSIONS.get(_as_str(role), {}).get(_as_str(current_status), ()))


def has_permission(role: str, current_status: str, target_status: str) -> bool:
    return _as_str(target_status) in available_transitions(role, current_status)


def status_info(status: str) -> dict[str, str]:
    return dict(STATUS_INFO.get(_as_str(status), STATUS_INFO[_DRAFT]))


def _check_review(canvas: Any, counts: CanvasContentCounts, result: CanvasValidationResult) -> None:
    for attr, label in REVIEW_MANDATORY_FIELDS:
        if _is_blank(_value(canvas, attr)):
            result.missing_fields.append(label)
            result.is_valid = False

    for key, minimum, label in REVIEW_MINIMUM_COUNTS:
        actual = getattr(counts, key)
        if actual < minimum:
            result.content_issues.append(
                f"{label}: Need at least {minimum}, currently have {actual}"
            )
            result.is_valid = False

    if not result.is_valid:
        result.errors.append("Canvas does not meet REVIEW criteria")


def _check_published(
    canvas: Any, counts: CanvasContentCounts, result: CanvasValidationResult
) -> None:
    _check_review(canvas, counts, result)
    if not result.is_valid:
        result.errors.append("Canvas must meet REVIEW criteria before being PUBLISHED")
        return

    for attr, label in PUBLISHED_MANDATORY_FIELDS:
        if _is_blank(_value(canvas, attr)):
            result.missing_fields.append(label)
            result.is_valid = False

    if counts.value_propositions < 5:
        result.warnings.append(
            "Consider adding more value propositions for a comprehensive published canvas"
        )
    if counts.customer_segments < 3:
        result.warnings.append(
            "Consider adding more customer segments for a comprehensive published canvas"
        )

    if not result.is_valid:
        result.errors.append("Canvas does not meet PUBLISHED criteria")


def _check_archived(child_statuses: Iterable[str], result: CanvasValidationResult) -> None:
    active = sum(1 for s in child_statuses if _as_str(s) != _ARCHIVED)
    if active:
        result.warnings.append(
            f"Canvas has {active} active child canvases. Consider archiving them first."
        )
    result.is_valid = True


def validate_status_transition(
    *,
    canvas: Any,
    counts: CanvasContentCounts,
    user_role: str,
    current_status: str,
    target_status: str,
    child_statuses: Iterable[str] = (),
) -> CanvasValidationResult:
    """
    Decide whether `user_role` may move `canvas` from `current_status` to `target_status`.

    Permission is checked first; a denied transition short-circuits all content checks.
    """

    role, current, target = _as_str(user_role), _as_str(current_status), _as_str(target_status)
    result = CanvasValidationResult()

    if not has_permission(role, current, target):
        result.is_valid = False
        result.errors.append(
            f"User role '{role}' does not have permission to change status "
            f"from '{current}' to '{target}'"
        )
        return result

    if target == _DRAFT:
        result.is_valid = True
    elif target == _REVIEW:
        _check_review(canvas, counts, result)
    elif target == _PUBLISHED:
        _check_published(canvas, counts, result)
    elif target == _ARCHIVED:
        _check_archived(child_statuses, result)
    else:
        result.is_valid = False
        result.errors.append(f"Invalid target status: {target}")

    return result


# --- Module Notes -----------------------------------------------------------
# Unknown targets can only reach the final branch if the permission matrix lists them;
# the branch stays so the matrix and the checks can evolve independently.
