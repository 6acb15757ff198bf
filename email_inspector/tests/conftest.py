from __future__ import annotations

from pathlib import Path

import pytest

SUBJECT_LINE = (
    "Subject: Service Call B-802641 - SEA124 - Alarm Active - P3 - Reader - P296563983-13\n"
)

SAMPLE_EML = (
    "From: dispatch@example.com\n"
    "Subject: Service Call B-802641 - SEA124 - Alarm Active - P3 - Reader - P296563983-13\n"
    "\n"
    "SIM-T Ticket: V1416404427\n"
    "Work Site: SEA124 Seattle Campus\n"
    "Work Site Address: 410 Terry Ave N, Seattle\n"
    "Device Name: Reader 3 East Door\n"
    "Problem Description: Device Offline since 02:00.\n"
    "Reader not responding=20to badge swipes.\n"
    "---\n"
    "Dispatch Team\n"
)


@pytest.fixture()
def subject_line() -> str:
    return SUBJECT_LINE


@pytest.fixture()
def sample_eml() -> str:
    return SAMPLE_EML


@pytest.fixture()
def eml_file(tmp_path: Path) -> Path:
    path = tmp_path / "service_call.eml"
    path.write_bytes(SAMPLE_EML.encode("utf-8"))
    return path
