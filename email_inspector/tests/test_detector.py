from __future__ import annotations

import re

import pytest

from email_inspector.target_engine import detector, patterns, scoring
from email_inspector.target_engine.patterns import RecognitionPattern


def test_subject_line_targets(subject_line: str) -> None:
    targets = detector.detect_targets(subject_line)
    found = [(target.text, target.field_type, target.start, target.end) for target in targets]
    assert found == [
        ("802641", "device_id", 24, 30),
        ("SEA124", "building_code", 33, 39),
        ("P296563983", "device_id", 71, 81),
    ]
    # The phrase patterns start inside spans that were already accepted.
    assert all(target.field_type != "job_name" for target in targets)


def test_prefixed_device_id_stops_at_suffix(subject_line: str) -> None:
    targets = detector.detect_targets(subject_line)
    device = next(target for target in targets if target.text.startswith("P"))
    assert device.text == "P296563983"
    assert subject_line[device.end :].startswith("-13")
    assert device.confidence == 1.0


def test_building_code_confidence(subject_line: str) -> None:
    targets = detector.detect_targets(subject_line)
    building = next(target for target in targets if target.field_type == "building_code")
    # strict site code, length bonus and body position
    assert building.confidence == 1.0
    assert building.context is not None
    assert building.context.line == 1
    assert building.context.before.endswith("B-802641 -")


def test_first_scanned_pattern_wins_overlap() -> None:
    text = "Notice\nAlarm Active on panel 4\n"
    targets = detector.detect_targets(text)
    assert len(targets) == 1
    target = targets[0]
    assert target.field_type == "job_name"
    assert target.text == "Alarm Active on panel 4"
    assert target.confidence == pytest.approx(0.6)


def test_catalog_order_decides_winner() -> None:
    text = "code ABC1234 here"
    first = RecognitionPattern("device_id", re.compile(r"\b[A-Z]{3}\d{4}\b"), "device")
    second = RecognitionPattern("building_code", re.compile(r"\b[A-Z]{3}\d{4}\b"), "site")
    device_first = detector.detect_targets(text, {"device_id": [first], "building_code": [second]})
    site_first = detector.detect_targets(text, {"building_code": [second], "device_id": [first]})
    assert [target.field_type for target in device_first] == ["device_id"]
    assert [target.field_type for target in site_first] == ["building_code"]


def test_match_whitespace_is_trimmed() -> None:
    text = "Status line\nMaintenance window tonight   \n"
    targets = detector.detect_targets(text)
    assert [target.text for target in targets] == ["Maintenance window tonight"]
    target = targets[0]
    assert text[target.start : target.end] == target.text


def test_threshold_filters_low_confidence() -> None:
    text = "Notice\nAlarm Active on panel 4\n"
    assert detector.detect_targets(text, min_confidence=0.7) == []


def test_threshold_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSPECTOR_MIN_CONFIDENCE", "0.75")
    assert detector.resolve_min_confidence() == 0.75
    monkeypatch.setenv("INSPECTOR_MIN_CONFIDENCE", "high")
    assert detector.resolve_min_confidence() == detector.MIN_CONFIDENCE
    assert detector.resolve_min_confidence(3.0) == 1.0


def test_empty_and_unmatched_input() -> None:
    assert detector.detect_targets("") == []
    assert detector.detect_targets("nothing to see here\n") == []


def test_registry_invariants(sample_eml: str) -> None:
    first = detector.detect_targets(sample_eml)
    second = detector.detect_targets(sample_eml)
    assert first == second
    assert first
    for index, target in enumerate(first):
        assert 0 <= target.start < target.end <= len(sample_eml)
        assert sample_eml[target.start : target.end] == target.text
        assert 0.5 <= target.confidence <= 1.0
        for other in first[index + 1 :]:
            assert target.start <= other.start
            assert not target.overlaps(other)
    by_text = {target.text: target.field_type for target in first}
    assert by_text["V1416404427"] == "device_id"
    assert by_text["SEA124"] == "building_code"


def test_scoring_numeric_device_id() -> None:
    full_text = "x" * 100
    assert scoring.score_confidence("device_id", "1234567", 50, full_text) == 1.0


def test_scoring_context_and_position() -> None:
    text = "Service call raised. Alarm panel tripped"
    start = text.index("Alarm")
    # context keyword and position bonus
    assert scoring.score_confidence("job_name", "Alarm panel tripped", start, text) == 0.8
    header = "SEA1 site visit" + " " * 100
    assert scoring.score_confidence("building_code", "SEA1", 0, header) == 0.6


def test_scoring_without_bonuses_is_base() -> None:
    assert scoring.score_confidence("job_number", "B-1", 0, "B-1 and more") == 0.5
    assert scoring.score_confidence("device_id", "12", 0, "") == 0.7


def test_catalog_lists_required_field_types() -> None:
    assert list(patterns.PATTERN_CATALOG) == [
        "building_code",
        "device_id",
        "job_name",
        "job_trouble_description",
    ]
    assert patterns.is_field_type("unassigned")
    assert not patterns.is_field_type("sql")
