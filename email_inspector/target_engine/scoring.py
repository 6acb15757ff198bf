"""Heuristic confidence scoring for detection candidates."""
from __future__ import annotations

from .patterns import (
    BUILDING_CODE,
    DEVICE_ID,
    JOB_NAME,
    JOB_TROUBLE_DESCRIPTION,
    PREFIXED_DEVICE_RE,
    STRICT_SITE_CODE_RE,
)

BASE_CONFIDENCE = 0.5
CONTEXT_WINDOW = 100
BODY_POSITION_RATIO = 0.2

CONTEXT_KEYWORDS: dict[str, tuple[tuple[str, ...], float]] = {
    JOB_NAME: (("service call",), 0.2),
    JOB_TROUBLE_DESCRIPTION: (("device offline", "alarm active"), 0.2),
    BUILDING_CODE: (("site", "building"), 0.1),
}


def score_confidence(field_type: str, text: str, start: int, full_text: str) -> float:
    """Score a candidate in ``[0, 1]``.

    Bonuses are additive on top of a 0.5 base: shape bonuses per field type,
    a keyword bonus from a 100 character window on each side of the match,
    and a position bonus for matches past the first fifth of the document.
    """

    confidence = BASE_CONFIDENCE + _shape_bonus(field_type, text)

    keywords, bonus = CONTEXT_KEYWORDS.get(field_type, ((), 0.0))
    if keywords:
        context = _context_window(full_text, start, start + len(text))
        if any(keyword in context for keyword in keywords):
            confidence += bonus

    if full_text and start / len(full_text) > BODY_POSITION_RATIO:
        confidence += 0.1

    return min(1.0, round(confidence, 6))


def _shape_bonus(field_type: str, text: str) -> float:
    bonus = 0.0
    if field_type == BUILDING_CODE:
        if STRICT_SITE_CODE_RE.search(text):
            bonus += 0.3
        if 5 <= len(text) <= 8:
            bonus += 0.1
    elif field_type == DEVICE_ID:
        if text.isdigit() and text.isascii():
            bonus += 0.2
        if PREFIXED_DEVICE_RE.match(text):
            bonus += 0.3
        if 6 <= len(text) <= 10:
            bonus += 0.2
    return bonus


def _context_window(full_text: str, start: int, end: int) -> str:
    before = full_text[max(0, start - CONTEXT_WINDOW) : start]
    after = full_text[end : end + CONTEXT_WINDOW]
    return (before + after).casefold()
