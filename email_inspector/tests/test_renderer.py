from __future__ import annotations

import re
from pathlib import Path

import pytest

from email_inspector.target_engine import registry, renderer, rules

DOCUMENT = (
    "Subject: Service Call B-802641 - SEA124 - Alarm Active\n"
    "Device Name: Reader 3 East Door\n"
    "Path: a/b (c)\n"
)


def build(strategy: str, name: str, text: str) -> rules.ExtractionProcedure:
    start = DOCUMENT.index(text)
    selection = rules.make_selection(DOCUMENT, start, start + len(text))
    return rules.generate_rule(strategy, name, selection.text, selection)


def test_javascript_regex_rule_shape() -> None:
    code = renderer.render_procedure(build("pattern", "buildingCode", "SEA124"))
    assert code == (
        "// Regex Rule: buildingCode\n"
        "static extractBuildingCode(content) {\n"
        "    const match = content.match(/SEA124/);\n"
        "    return match ? match[1] || match[0] : '';\n"
        "}"
    )


def test_javascript_regex_literal_escapes_slashes() -> None:
    code = renderer.render_procedure(build("regex", "path", "a/b (c)"))
    assert "content.match(/a\\/b \\(c\\)/);" in code


def test_javascript_shapes_for_other_strategies() -> None:
    coordinate = renderer.render_procedure(build("position", "site", "SEA124"))
    start = DOCUMENT.index("SEA124")
    assert coordinate.startswith("// Coordinate Rule: site\n")
    assert f"content.substring({start}, {start + 6}).trim();" in coordinate

    structural = renderer.render_procedure(build("structural", "device", "Reader 3"))
    assert structural.startswith("// CSS Selector Rule: device\n")
    assert 'lines.find(l => l.includes("Reader 3"))' in structural

    anchored = renderer.render_procedure(build("anchored", "device", "Device Name:"))
    assert anchored.startswith("// XPath Rule: device\n")
    assert "line.replace(\"Device Name:\", '').trim()" in anchored


@pytest.mark.parametrize(
    ("strategy", "text", "expected"),
    [
        ("pattern", "SEA124", "SEA124"),
        ("pattern", "a/b (c)", "a/b (c)"),
        ("position", "Reader 3 East Door", "Reader 3 East Door"),
        ("structural", "Reader 3", "Device Name: Reader 3 East Door"),
        ("anchored", "Device Name:", "Reader 3 East Door"),
    ],
)
def test_python_rendering_executes(strategy: str, text: str, expected: str) -> None:
    procedure = build(strategy, "deviceName", text)
    code = renderer.render_procedure(procedure, "python")
    namespace: dict[str, object] = {"re": re}
    exec(code, namespace)
    extract = namespace["extract_device_name"]
    assert callable(extract)
    assert extract(DOCUMENT) == expected
    assert extract(DOCUMENT) == rules.apply_procedure(procedure, DOCUMENT)


def test_unknown_language_is_rejected() -> None:
    with pytest.raises(ValueError):
        renderer.render_procedure(build("pattern", "site", "SEA124"), "cobol")


def test_function_names() -> None:
    assert renderer.js_method_name("building code") == "extractBuildingcode"
    assert renderer.python_function_name("jobNumber") == "extract_job_number"
    assert renderer.python_function_name("  ") == "extract_value"


def test_target_report(tmp_path: Path) -> None:
    session = registry.open_session(DOCUMENT, source="call|1.eml")
    output_path = tmp_path / "report" / "TARGETS.md"
    content = renderer.render_target_report(session, output_path)
    assert output_path.read_text(encoding="utf-8") == content
    assert content.startswith("# Parser Targets")
    assert "**Source:** call\\|1.eml" in content
    assert f"**Total targets:** {len(session)}" in content
    assert "| SEA124 |" in content
    assert "building_code (1)" in content


def test_empty_target_report() -> None:
    session = registry.open_session("nothing here\n")
    content = renderer.render_target_report(session)
    assert "_No targets detected._" in content
    assert "**Total targets:** 0" in content
