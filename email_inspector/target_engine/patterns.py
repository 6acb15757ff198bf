"""Recognition patterns for work-order fields."""
from __future__ import annotations

import re
from dataclasses import dataclass

BUILDING_CODE = "building_code"
DEVICE_ID = "device_id"
JOB_NAME = "job_name"
JOB_TROUBLE_DESCRIPTION = "job_trouble_description"
JOB_NUMBER = "job_number"
BUILDING_ADDRESS = "building_address"
UNASSIGNED = "unassigned"

FIELD_TYPES = (
    BUILDING_CODE,
    DEVICE_ID,
    JOB_NAME,
    JOB_TROUBLE_DESCRIPTION,
    JOB_NUMBER,
    BUILDING_ADDRESS,
)

# Strict site codes such as SEA104; reused by the scorer.
STRICT_SITE_CODE_RE = re.compile(r"\bSE[A-Z]\d{3,4}\b")
PREFIXED_DEVICE_RE = re.compile(r"^[VP]\d+$")

# Phrases run to the next sentence terminator or line break.
_PHRASE_TAIL = r"[^.!?\n]*"


@dataclass(frozen=True)
class RecognitionPattern:
    field_type: str
    regex: re.Pattern[str]
    label: str

    def finditer(self, text: str):
        return self.regex.finditer(text)


def _pattern(field_type: str, expression: str, label: str) -> RecognitionPattern:
    return RecognitionPattern(field_type, re.compile(expression), label)


# Iteration order decides which of two overlapping candidates wins.
PATTERN_CATALOG: dict[str, list[RecognitionPattern]] = {
    BUILDING_CODE: [
        RecognitionPattern(BUILDING_CODE, STRICT_SITE_CODE_RE, "strict site code"),
        _pattern(BUILDING_CODE, r"\b[A-Z]{2,3}\d{1,4}\b", "generic site code"),
    ],
    DEVICE_ID: [
        _pattern(DEVICE_ID, r"\b\d{6,10}\b", "numeric device id"),
        _pattern(DEVICE_ID, r"\bV\d{7,10}\b", "V-prefixed device id"),
        _pattern(DEVICE_ID, r"\bP\d{5,9}\b", "P-prefixed device id"),
    ],
    JOB_NAME: [
        _pattern(JOB_NAME, rf"\b(?:Service Call|Alarm)\b{_PHRASE_TAIL}", "job phrase"),
    ],
    JOB_TROUBLE_DESCRIPTION: [
        _pattern(
            JOB_TROUBLE_DESCRIPTION,
            rf"\b(?:Device Offline|Line Error|Alarm Active|Maintenance)\b{_PHRASE_TAIL}",
            "fault phrase",
        ),
        _pattern(
            JOB_TROUBLE_DESCRIPTION,
            rf"\b(?:Input Output|Power Supply|Reader|Contact)\b{_PHRASE_TAIL}",
            "hardware phrase",
        ),
    ],
}


def iter_patterns(catalog: dict[str, list[RecognitionPattern]] | None = None):
    """Yield patterns in scan order: tag order, then pattern order."""
    for patterns in (catalog if catalog is not None else PATTERN_CATALOG).values():
        yield from patterns


def is_field_type(value: str | None) -> bool:
    return value in FIELD_TYPES or value == UNASSIGNED
