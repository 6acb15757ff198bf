"""Greedy catalog scan that turns normalized text into detected targets."""
from __future__ import annotations

import logging
import os

from .patterns import PATTERN_CATALOG, RecognitionPattern, iter_patterns
from .scoring import score_confidence
from .targets import DetectedTarget, build_context, spans_overlap

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.5


def resolve_min_confidence(value: float | None = None) -> float:
    if value is not None:
        return min(max(value, 0.0), 1.0)
    env_value = os.environ.get("INSPECTOR_MIN_CONFIDENCE")
    if env_value:
        try:
            return min(max(float(env_value), 0.0), 1.0)
        except ValueError:
            logger.debug("Invalid INSPECTOR_MIN_CONFIDENCE value: %s", env_value)
    return MIN_CONFIDENCE


def trimmed_span(text: str, start: int, end: int) -> tuple[int, int]:
    raw = text[start:end]
    leading = len(raw) - len(raw.lstrip())
    trailing = len(raw) - len(raw.rstrip())
    return start + leading, end - trailing


def detect_targets(
    text: str,
    catalog: dict[str, list[RecognitionPattern]] | None = None,
    *,
    min_confidence: float | None = None,
) -> list[DetectedTarget]:
    """Scan ``text`` with every catalog pattern and return accepted targets.

    Candidates are visited in catalog order (field type, then pattern, then
    left to right). A candidate overlapping an already accepted target is
    dropped without comparing scores. The result is sorted by start offset.
    """

    threshold = resolve_min_confidence(min_confidence)
    accepted: list[DetectedTarget] = []
    if not text:
        return accepted
    for pattern in iter_patterns(catalog if catalog is not None else PATTERN_CATALOG):
        for match in pattern.finditer(text):
            start, end = trimmed_span(text, match.start(), match.end())
            if start >= end:
                continue
            candidate_text = text[start:end]
            if any(spans_overlap(start, end, target.start, target.end) for target in accepted):
                logger.debug(
                    "Skipping overlapping match %r for %s", candidate_text, pattern.field_type
                )
                continue
            confidence = score_confidence(pattern.field_type, candidate_text, start, text)
            if confidence < threshold:
                logger.debug(
                    "Rejected %r for %s (confidence %.2f)",
                    candidate_text,
                    pattern.field_type,
                    confidence,
                )
                continue
            accepted.append(
                DetectedTarget(
                    text=candidate_text,
                    start=start,
                    end=end,
                    confidence=confidence,
                    field_type=pattern.field_type,
                    context=build_context(text, start, end),
                )
            )
            logger.debug(
                "Found target %r (%s via %s, confidence %.2f)",
                candidate_text,
                pattern.field_type,
                pattern.label,
                confidence,
            )
    accepted.sort(key=lambda target: target.start)
    logger.info("Detection complete: %d targets", len(accepted))
    return accepted
