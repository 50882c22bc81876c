"""
tests.test_canvas_status

Unit tests for the canvas status workflow rules (no database).
"""

from __future__ import annotations

from capopt_platform.canvas.status import (
    CanvasContentCounts,
    available_transitions,
    has_permission,
    status_info,
    validate_status_transition,
)

READY_FOR_REVIEW = {
    "name": "Copper Operations",
    "description": "Open pit copper mine",
    "industry": "MINING_METALS",
    "sector": "COPPER",
    "business_type": "CORPORATION",
}

FULL_COUNTS = CanvasContentCounts(
    value_propositions=3,
    customer_segments=2,
    revenue_streams=2,
    partnerships=2,
    resources=3,
    activities=3,
    cost_structures=2,
    channels=2,
)


def _validate(canvas, counts, *, role="ADMIN", current="DRAFT", target="REVIEW", children=()):
    return validate_status_transition(
        canvas=canvas,
        counts=counts,
        user_role=role,
        current_status=current,
        target_status=target,
        child_statuses=children,
    )


def test_permission_matrix_rows() -> None:
    assert available_transitions("ADMIN", "DRAFT") == ["REVIEW", "ARCHIVED"]
    assert available_transitions("MANAGER", "ARCHIVED") == ["DRAFT", "REVIEW"]
    assert available_transitions("USER", "ARCHIVED") == []
    assert available_transitions("VIEWER", "DRAFT") == []
    assert has_permission("ADMIN", "ARCHIVED", "PUBLISHED")
    assert not has_permission("MANAGER", "ARCHIVED", "PUBLISHED")
    assert not has_permission("ADMIN", "DRAFT", "DRAFT")


def test_denied_transition_short_circuits_content_checks() -> None:
    result = _validate({}, CanvasContentCounts(), role="USER", current="DRAFT", target="PUBLISHED")
    assert not result.is_valid
    assert result.errors == [
        "User role 'USER' does not have permission to change status from 'DRAFT' to 'PUBLISHED'"
    ]
    assert result.missing_fields == []
    assert result.content_issues == []


def test_review_reports_missing_fields_and_counts() -> None:
    canvas = {**READY_FOR_REVIEW, "description": "   ", "business_type": None}
    counts = CanvasContentCounts(value_propositions=1, customer_segments=2)
    result = _validate(canvas, counts)

    assert not result.is_valid
    assert result.missing_fields == ["Description", "Business Type"]
    assert "Value Propositions: Need at least 3, currently have 1" in result.content_issues
    assert "Key Resources: Need at least 3, currently have 0" in result.content_issues
    assert not any(issue.startswith("Customer Segments") for issue in result.content_issues)
    assert result.errors == ["Canvas does not meet REVIEW criteria"]


def test_review_passes_when_complete() -> None:
    result = _validate(READY_FOR_REVIEW, FULL_COUNTS)
    assert result.is_valid
    assert result.errors == []


def test_published_requires_review_criteria_first() -> None:
    result = _validate(READY_FOR_REVIEW, CanvasContentCounts(), current="REVIEW", target="PUBLISHED")
    assert not result.is_valid
    assert result.errors == [
        "Canvas does not meet REVIEW criteria",
        "Canvas must meet REVIEW criteria before being PUBLISHED",
    ]


def test_published_checks_strategy_fields_and_warns() -> None:
    result = _validate(
        {**READY_FOR_REVIEW, "compliance_requirements": []},
        FULL_COUNTS,
        current="REVIEW",
        target="PUBLISHED",
    )
    assert not result.is_valid
    assert "Strategic Objective" in result.missing_fields
    assert "Compliance Requirements" in result.missing_fields
    assert result.errors == ["Canvas does not meet PUBLISHED criteria"]
    assert len(result.warnings) == 2

    complete = {
        **READY_FOR_REVIEW,
        "strategic_objective": "Grow output",
        "value_proposition": "Low-cost copper",
        "risk_profile": "MEDIUM",
        "digital_maturity": "ADVANCED",
        "compliance_requirements": ["ISO 14001"],
    }
    result = _validate(complete, FULL_COUNTS, current="REVIEW", target="PUBLISHED")
    assert result.is_valid
    assert result.errors == []


def test_archive_always_valid_but_warns_about_active_children() -> None:
    result = _validate({}, CanvasContentCounts(), target="ARCHIVED", children=("DRAFT", "ARCHIVED"))
    assert result.is_valid
    assert result.warnings == [
        "Canvas has 1 active child canvases. Consider archiving them first."
    ]


def test_status_info_falls_back_to_draft() -> None:
    assert status_info("PUBLISHED")["label"] == "Published"
    assert status_info("UNKNOWN") == status_info("DRAFT")
