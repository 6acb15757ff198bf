"""Per-document target registry and export persistence."""
from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, cast

from .detector import detect_targets
from .errors import (
    InvalidSpanError,
    OverlappingSpanError,
    UnknownFieldTypeError,
)
from .patterns import UNASSIGNED, RecognitionPattern, is_field_type
from .targets import DetectedTarget, build_context, spans_overlap
from .workorder import extract_work_order

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 200
CONFIRMATION_BONUS = 0.2


def now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat()


@dataclass
class DocumentSession:
    """One loaded document and the targets detected in it.

    Sessions share no state, so separate documents can be processed side by
    side. Manual edits are lost on ``rescan``.
    """

    text: str
    source: str | None = None
    catalog: dict[str, list[RecognitionPattern]] | None = None
    min_confidence: float | None = None
    targets: list[DetectedTarget] = field(default_factory=list)
    history: list[dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.targets)

    def __iter__(self) -> Iterator[DetectedTarget]:
        return iter(self.targets)

    def __getitem__(self, index: int) -> DetectedTarget:
        return self.targets[index]

    def rescan(self) -> list[DetectedTarget]:
        # Built aside and swapped in whole; readers never see a partial list.
        fresh = detect_targets(self.text, self.catalog, min_confidence=self.min_confidence)
        self.targets = fresh
        self._record("rescanned", count=len(fresh))
        return fresh

    def load_text(self, text: str, source: str | None = None) -> list[DetectedTarget]:
        self.text = text
        self.source = source
        return self.rescan()

    def clear(self) -> None:
        self.targets = []
        self._record("cleared")

    def reassign(self, index: int, field_type: str) -> DetectedTarget:
        if not is_field_type(field_type):
            raise UnknownFieldTypeError(f"unknown field type: {field_type}")
        target = self._target_at(index)
        target.field_type = field_type
        if field_type != UNASSIGNED:
            target.confidence = min(1.0, round(target.confidence + CONFIRMATION_BONUS, 6))
        logger.info("Target %d mapped to %s", index, field_type)
        self._record("reassigned", index=index, field_type=field_type)
        return target

    def resize_target(self, index: int, new_start: int, new_end: int) -> DetectedTarget:
        target = self._target_at(index)
        if not 0 <= new_start < new_end <= len(self.text):
            raise InvalidSpanError(
                f"span [{new_start}, {new_end}) outside document of length {len(self.text)}"
            )
        for other_index, other in enumerate(self.targets):
            if other_index == index:
                continue
            if spans_overlap(new_start, new_end, other.start, other.end):
                raise OverlappingSpanError(
                    f"span [{new_start}, {new_end}) overlaps target {other_index} "
                    f"[{other.start}, {other.end})"
                )
        target.start = new_start
        target.end = new_end
        target.text = self.text[new_start:new_end]
        target.context = build_context(self.text, new_start, new_end)
        self.targets.sort(key=lambda item: item.start)
        self._record("resized", start=new_start, end=new_end)
        return target

    def export(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "exported_at": now_iso(),
            "length": len(self.text),
            "rawContent": self.text,
            "workOrder": extract_work_order(self.text).to_dict(),
            "detectedTargets": [target.to_dict() for target in self.targets],
            "history": list(self.history),
        }

    def _target_at(self, index: int) -> DetectedTarget:
        if not 0 <= index < len(self.targets):
            raise IndexError(f"no target at index {index} (have {len(self.targets)})")
        return self.targets[index]

    def _record(self, change: str, **details: Any) -> None:
        self.history.append({"change": change, "timestamp": now_iso(), **details})
        if len(self.history) > HISTORY_LIMIT:
            del self.history[:-HISTORY_LIMIT]


def open_session(
    text: str,
    source: str | None = None,
    *,
    min_confidence: float | None = None,
) -> DocumentSession:
    session = DocumentSession(text=text, source=source, min_confidence=min_confidence)
    session.rescan()
    return session


def save_export(path: Path, session: DocumentSession) -> dict[str, Any]:
    data = session.export()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)
    return data


def load_export(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return cast(dict[str, Any], json.load(fh))


def targets_from_export(data: Mapping[str, Any]) -> list[DetectedTarget]:
    entries = data.get("detectedTargets", []) or []
    targets = [DetectedTarget.from_dict(entry) for entry in entries if isinstance(entry, dict)]
    targets.sort(key=lambda item: item.start)
    return targets
