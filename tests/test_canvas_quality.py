"""
tests.test_canvas_quality

Unit tests for section content quality checks and the section registry.
"""

from __future__ import annotations

from capopt_platform.canvas.quality import validate_content_quality
from capopt_platform.canvas.sections import SECTIONS, build_sections, resolve_section


def test_duplicate_titles_are_case_insensitive_and_trimmed() -> None:
    issues = validate_content_quality(
        {
            "customer_segments": [
                {"name": "Smelters", "description": "Domestic"},
                {"name": " smelters ", "description": "Export"},
            ]
        }
    )
    assert issues == ["Duplicate titles found in customer_segments: smelters"]


def test_missing_title_and_description() -> None:
    issues = validate_content_quality(
        {
            "partnerships": [{"name": "", "description": "Rail operator"}],
            "channels": [{"type": "Direct sales", "description": None}],
        }
    )
    assert "partnerships[0]: Missing title" in issues
    assert "channels[0]: Missing description" in issues


def test_sections_titled_by_description_do_not_report_missing_description() -> None:
    issues = validate_content_quality({"value_propositions": [{"description": "Reliable supply"}]})
    assert issues == []


def test_resolve_section_accepts_attr_slug_and_camel_case() -> None:
    assert resolve_section("cost_structures").slug == "cost-structures"
    assert resolve_section("cost-structures").attr == "cost_structures"
    assert resolve_section("costStructures").attr == "cost_structures"
    assert resolve_section("unknown") is None
    assert len(SECTIONS) == 8


def test_build_sections_validates_and_ignores_unknown_keys() -> None:
    built = build_sections(
        {
            "valuePropositions": [{"description": "Low cost"}],
            "notASection": [{"x": 1}],
        }
    )
    assert list(built) == ["value_propositions"]
    assert built["value_propositions"][0].description == "Low cost"
