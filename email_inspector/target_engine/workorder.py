"""Labelled-field extraction of a work order from a decoded message."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .patterns import (
    BUILDING_ADDRESS,
    BUILDING_CODE,
    DEVICE_ID,
    JOB_NAME,
    JOB_NUMBER,
    JOB_TROUBLE_DESCRIPTION,
)

logger = logging.getLogger(__name__)

SUBJECT_RE = re.compile(r"^subject:(.*)$", re.IGNORECASE | re.MULTILINE)
BODY_SPLIT_RE = re.compile(r"\n\s*\n")
SERVICE_CALL_PREFIX_RE = re.compile(r"^Service Call:\s*", re.IGNORECASE)
JOB_NUMBER_RE = re.compile(r"SIM-T Ticket:\s*([VP]\d+)", re.IGNORECASE)
DEVICE_NAME_RE = re.compile(r"Device Name:\s*([^\r\n]+)", re.IGNORECASE)
SEPARATOR_RE = re.compile(r"^[-=_*]{2,}")

# Most specific label first.
BUILDING_LABELS = [
    re.compile(r"Work Site:\s*([^\r\n]+)", re.IGNORECASE),
    re.compile(r"WorkSite:\s*([^\r\n]+)", re.IGNORECASE),
    re.compile(r"Site:\s*([^\r\n]+)", re.IGNORECASE),
]
ADDRESS_LABELS = [
    re.compile(r"Work Site Address:\s*([^\r\n]+)", re.IGNORECASE),
    re.compile(r"Site Address:\s*([^\r\n]+)", re.IGNORECASE),
    re.compile(r"Address:\s*([^\r\n]+)", re.IGNORECASE),
]

PROBLEM_LABEL = "Problem Description:"


@dataclass
class WorkOrder:
    job_number: str = ""
    job_name: str = ""
    device_name: str = ""
    problem_description: str = ""
    building: str = ""
    address: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            JOB_NUMBER: self.job_number,
            JOB_NAME: self.job_name,
            DEVICE_ID: self.device_name,
            JOB_TROUBLE_DESCRIPTION: self.problem_description,
            BUILDING_CODE: self.building,
            BUILDING_ADDRESS: self.address,
        }


def split_message(text: str) -> tuple[str, str]:
    match = SUBJECT_RE.search(text)
    subject = match.group(1).strip() if match else ""
    parts = BODY_SPLIT_RE.split(text.replace("\r\n", "\n"), maxsplit=1)
    body = parts[1] if len(parts) > 1 else ""
    return subject, body


def first_label_value(content: str, patterns: list[re.Pattern[str]]) -> str:
    for pattern in patterns:
        match = pattern.search(content)
        if match:
            return match.group(1).strip()
    return ""


def decode_quoted_printable(value: str) -> str:
    value = re.sub(r"=\r?\n", "", value)
    value = re.sub(r"=\s", " ", value)
    value = re.sub(r"=$", "", value)
    value = re.sub(r"=([0-9A-F]{2})", lambda match: chr(int(match.group(1), 16)), value)
    return value.strip()


def extract_problem_description(content: str) -> str:
    parts: list[str] = []
    capturing = False
    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if line.startswith(PROBLEM_LABEL):
            parts = [line[len(PROBLEM_LABEL) :].strip()]
            capturing = True
            continue
        if not capturing:
            continue
        if SEPARATOR_RE.match(line) or "---" in line or "___" in line:
            break
        if line:
            parts.append(line)
    return decode_quoted_printable(" ".join(part for part in parts if part))


def extract_work_order(text: str) -> WorkOrder:
    subject, body = split_message(text)
    job_name = " ".join(SERVICE_CALL_PREFIX_RE.sub("", subject).split())
    number_match = JOB_NUMBER_RE.search(body)
    device_match = DEVICE_NAME_RE.search(body)
    order = WorkOrder(
        job_number=number_match.group(1).upper() if number_match else "",
        job_name=job_name,
        device_name=device_match.group(1).strip() if device_match else "",
        problem_description=extract_problem_description(body),
        building=first_label_value(body, BUILDING_LABELS),
        address=first_label_value(body, ADDRESS_LABELS),
    )
    missing = [name for name, value in order.to_dict().items() if not value]
    if missing:
        logger.debug("Work order fields not found: %s", ", ".join(missing))
    return order
