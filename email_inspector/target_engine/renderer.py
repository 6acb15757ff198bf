"""Rendering utilities for extraction procedures and target reports."""
from __future__ import annotations

import json
import re
from collections import Counter
from pathlib import Path

from .registry import DocumentSession, now_iso
from .rules import ANCHORED, PATTERN, POSITION, STRUCTURAL, ExtractionProcedure

LANGUAGES = ("javascript", "python")

RULE_TITLES = {
    PATTERN: "Regex Rule",
    POSITION: "Coordinate Rule",
    STRUCTURAL: "CSS Selector Rule",
    ANCHORED: "XPath Rule",
}

JS_REGEX_SPECIALS_RE = re.compile(r"[.*+?^${}()|\[\]\\/]")
JS_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def render_procedure(procedure: ExtractionProcedure, language: str = "javascript") -> str:
    if language == "javascript":
        return _render_javascript(procedure)
    if language == "python":
        return _render_python(procedure)
    raise ValueError(f"unsupported language: {language!r} (expected one of {LANGUAGES})")


def js_regex_literal(text: str) -> str:
    escaped = JS_REGEX_SPECIALS_RE.sub(lambda match: "\\" + match.group(0), text)
    for raw, replacement in JS_CONTROL_ESCAPES.items():
        escaped = escaped.replace(raw, replacement)
    return escaped


def js_method_name(name: str) -> str:
    cleaned = re.sub(r"\W", "", name)
    return "extract" + cleaned[:1].upper() + cleaned[1:]


def python_function_name(name: str) -> str:
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name.strip())
    snake = re.sub(r"\W+", "_", snake).strip("_").lower()
    return f"extract_{snake or 'value'}"


def _render_javascript(procedure: ExtractionProcedure) -> str:
    params = procedure.parameters
    header = [
        f"// {RULE_TITLES[procedure.strategy]}: {procedure.name}",
        f"static {js_method_name(procedure.name)}(content) {{",
    ]
    if procedure.strategy == PATTERN:
        literal = params.get("literal", procedure.expected)
        body = [
            f"    const match = content.match(/{js_regex_literal(literal)}/);",
            "    return match ? match[1] || match[0] : '';",
        ]
    elif procedure.strategy == POSITION:
        body = [f"    return content.substring({params['start']}, {params['end']}).trim();"]
    elif procedure.strategy == STRUCTURAL:
        needle = json.dumps(params["contains"])
        body = [
            f"    // Line search for content containing {needle}",
            "    const lines = content.split(/[\\r\\n]/);",
            f"    const line = lines.find(l => l.includes({needle}));",
            "    return line ? line.trim() : '';",
        ]
    else:
        anchor = json.dumps(params["anchor"])
        body = [
            f"    // Anchor search - find content containing {anchor}",
            "    const lines = content.split(/[\\r\\n]/);",
            f"    const line = lines.find(l => l.includes({anchor}));",
            f"    return line ? line.replace({anchor}, '').trim() : '';",
        ]
    return "\n".join([*header, *body, "}"])


def _render_python(procedure: ExtractionProcedure) -> str:
    params = procedure.parameters
    header = [
        f"# {RULE_TITLES[procedure.strategy]}: {procedure.name}",
        f"def {python_function_name(procedure.name)}(content: str) -> str:",
    ]
    if procedure.strategy == PATTERN:
        body = [
            f"    match = re.search({params['pattern']!r}, content)",
            "    if not match:",
            "        return ''",
            "    return match.group(1) if match.groups() else match.group(0)",
        ]
    elif procedure.strategy == POSITION:
        body = [f"    return content[{params['start']}:{params['end']}].strip()"]
    elif procedure.strategy == STRUCTURAL:
        body = [
            "    for line in re.split(r'[\\r\\n]', content):",
            f"        if {params['contains']!r} in line:",
            "            return line.strip()",
            "    return ''",
        ]
    else:
        anchor = params["anchor"]
        body = [
            "    for line in re.split(r'[\\r\\n]', content):",
            f"        if {anchor!r} in line:",
            f"            return line.replace({anchor!r}, '', 1).strip()",
            "    return ''",
        ]
    return "\n".join([*header, *body])


def render_target_report(session: DocumentSession, output_path: Path | None = None) -> str:
    field_counts: Counter[str] = Counter(target.field_type for target in session)
    lines = ["# Parser Targets", "", f"_Generated: {now_iso()}_", ""]
    if session.source:
        lines.append(f"**Source:** {escape_cell(session.source)}")
        lines.append("")
    lines.append(f"**Total targets:** {len(session)}")
    lines.append("")
    if field_counts:
        summary = ", ".join(f"{name} ({count})" for name, count in sorted(field_counts.items()))
        lines.append(f"**By field:** {summary}")
        lines.append("")
    lines.append("| # | Field | Text | Confidence | Line | Span |")
    lines.append("| --- | --- | --- | --- | --- | --- |")
    if not session.targets:
        lines.append("")
        lines.append("_No targets detected._")
    for index, target in enumerate(session):
        line = target.context.line if target.context else ""
        lines.append(
            f"| {index} | {escape_cell(target.field_type)} | {escape_cell(target.text)} | "
            f"{target.confidence:.0%} | {line} | {target.start}-{target.end} |"
        )
    lines.append("")
    content = "\n".join(lines)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
    return content


def escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")
