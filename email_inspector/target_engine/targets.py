"""Detected target model."""
from __future__ import annotations

from dataclasses import asdict, dataclass

from .patterns import UNASSIGNED

CONTEXT_WINDOW = 50


@dataclass(frozen=True)
class TargetContext:
    before: str
    after: str
    line: int

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass
class DetectedTarget:
    """A typed span of the normalized text buffer, ``[start, end)``."""

    text: str
    start: int
    end: int
    confidence: float
    field_type: str = UNASSIGNED
    context: TargetContext | None = None

    def overlaps(self, other: DetectedTarget) -> bool:
        return spans_overlap(self.start, self.end, other.start, other.end)

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict[str, object]:
        return {
            "text": self.text,
            "startPos": self.start,
            "endPos": self.end,
            "confidence": self.confidence,
            "fieldType": self.field_type,
            "context": self.context.to_dict() if self.context else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> DetectedTarget:
        context_data = data.get("context")
        context = None
        if isinstance(context_data, dict):
            context = TargetContext(
                before=str(context_data.get("before", "")),
                after=str(context_data.get("after", "")),
                line=int(context_data.get("line", 1)),
            )
        return cls(
            text=str(data["text"]),
            start=int(data["startPos"]),  # type: ignore[arg-type]
            end=int(data["endPos"]),  # type: ignore[arg-type]
            confidence=float(data["confidence"]),  # type: ignore[arg-type]
            field_type=str(data.get("fieldType") or UNASSIGNED),
            context=context,
        )


def spans_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return not (end_a <= start_b or end_b <= start_a)


def line_number(text: str, position: int) -> int:
    return text.count("\n", 0, position) + 1


def build_context(text: str, start: int, end: int) -> TargetContext:
    return TargetContext(
        before=text[max(0, start - CONTEXT_WINDOW) : start].strip(),
        after=text[end : end + CONTEXT_WINDOW].strip(),
        line=line_number(text, start),
    )
