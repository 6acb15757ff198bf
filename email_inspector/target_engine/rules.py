"""Turn operator selections into replayable extraction procedures."""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any

from .errors import EmptyNameError, EmptySelectionError, UnknownStrategyError
from .targets import line_number

logger = logging.getLogger(__name__)

PATTERN = "pattern"
POSITION = "position"
STRUCTURAL = "structural"
ANCHORED = "anchored"

STRATEGIES = (PATTERN, POSITION, STRUCTURAL, ANCHORED)

STRATEGY_ALIASES = {
    "regex": PATTERN,
    "coordinates": POSITION,
    "css": STRUCTURAL,
    "xpath": ANCHORED,
}

CONTEXT_LINES = 3
LINE_SPLIT_RE = re.compile(r"[\r\n]")


@dataclass(frozen=True)
class SelectionRange:
    text: str
    start: int
    end: int
    line: int = 1
    before_context: str = ""
    after_context: str = ""

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass
class ExtractionProcedure:
    strategy: str
    name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    source_selection: SelectionRange | None = None

    @property
    def expected(self) -> str:
        return self.source_selection.text if self.source_selection else ""

    def describe(self) -> dict[str, Any]:
        return {"strategy": self.strategy, "name": self.name, "parameters": dict(self.parameters)}

    def to_dict(self) -> dict[str, Any]:
        data = self.describe()
        data["source_selection"] = (
            self.source_selection.to_dict() if self.source_selection else None
        )
        return data


@dataclass(frozen=True)
class RuleTestResult:
    passed: bool
    value: str
    reason: str | None = None


def resolve_strategy(name: str) -> str:
    key = (name or "").strip().lower()
    key = STRATEGY_ALIASES.get(key, key)
    if key not in STRATEGIES:
        raise UnknownStrategyError(f"unknown rule strategy: {name!r}")
    return key


def make_selection(buffer: str, start: int, end: int) -> SelectionRange:
    """Describe ``buffer[start:end]`` the way the operator selected it."""
    start = max(0, start)
    end = min(len(buffer), end)
    preceding = buffer[:start].split("\n")
    following = buffer[end:].split("\n")
    return SelectionRange(
        text=buffer[start:end].strip(),
        start=start,
        end=end,
        line=line_number(buffer, start),
        before_context="\n".join(preceding[-CONTEXT_LINES:]),
        after_context="\n".join(following[:CONTEXT_LINES]),
    )


def generate_rule(
    strategy: str,
    name: str,
    selected_text: str,
    selection: SelectionRange | None = None,
) -> ExtractionProcedure:
    resolved = resolve_strategy(strategy)
    if not name or not name.strip():
        raise EmptyNameError("rule name must not be empty")
    if not selected_text or not selected_text.strip():
        raise EmptySelectionError("select some text before generating a rule")
    if selection is None:
        selection = SelectionRange(text=selected_text, start=0, end=len(selected_text))
    elif selection.text != selected_text:
        selection = SelectionRange(
            text=selected_text,
            start=selection.start,
            end=selection.end,
            line=selection.line,
            before_context=selection.before_context,
            after_context=selection.after_context,
        )

    if resolved == PATTERN:
        parameters: dict[str, Any] = {
            "pattern": re.escape(selected_text),
            "literal": selected_text,
        }
    elif resolved == POSITION:
        parameters = {"start": selection.start, "end": selection.end}
    elif resolved == STRUCTURAL:
        parameters = {"contains": selected_text}
    else:
        parameters = {"anchor": selected_text}

    procedure = ExtractionProcedure(
        strategy=resolved,
        name=name.strip(),
        parameters=parameters,
        source_selection=selection,
    )
    logger.info("Generated %s rule %s", resolved, procedure.name)
    return procedure


def find_line(content: str, needle: str) -> str | None:
    for line in LINE_SPLIT_RE.split(content):
        if needle in line:
            return line
    return None


def apply_procedure(procedure: ExtractionProcedure, content: str) -> str:
    params = procedure.parameters
    if procedure.strategy == PATTERN:
        match = re.search(params["pattern"], content)
        if not match:
            return ""
        if match.groups() and match.group(1) is not None:
            return match.group(1)
        return match.group(0)
    if procedure.strategy == POSITION:
        return content[params["start"] : params["end"]].strip()
    if procedure.strategy == STRUCTURAL:
        line = find_line(content, params["contains"])
        return line.strip() if line is not None else ""
    if procedure.strategy == ANCHORED:
        anchor = params["anchor"]
        line = find_line(content, anchor)
        return line.replace(anchor, "", 1).strip() if line is not None else ""
    raise UnknownStrategyError(f"unknown rule strategy: {procedure.strategy!r}")


def self_test(procedure: ExtractionProcedure, document: str) -> RuleTestResult:
    """Replay ``procedure`` on the document it was generated from."""
    expected = procedure.expected
    value = apply_procedure(procedure, document)
    if procedure.strategy in (PATTERN, POSITION):
        if value == expected:
            return RuleTestResult(True, value)
        if procedure.strategy == PATTERN:
            reason = "literal not found in document" if not value else "literal mismatch"
        else:
            reason = "document offsets no longer hold the selection"
        return RuleTestResult(False, value, reason)
    needle = procedure.parameters.get("contains") or procedure.parameters.get("anchor")
    if find_line(document, needle) is None:
        return RuleTestResult(False, value, "no line contains the selection")
    return RuleTestResult(True, value)
