from __future__ import annotations

from email_inspector.target_engine import workorder


def test_extract_work_order(sample_eml: str) -> None:
    order = workorder.extract_work_order(sample_eml)
    assert order.job_name == (
        "Service Call B-802641 - SEA124 - Alarm Active - P3 - Reader - P296563983-13"
    )
    assert order.job_number == "V1416404427"
    assert order.building == "SEA124 Seattle Campus"
    assert order.address == "410 Terry Ave N, Seattle"
    assert order.device_name == "Reader 3 East Door"
    assert order.problem_description == (
        "Device Offline since 02:00. Reader not responding to badge swipes."
    )


def test_work_order_keys_follow_field_types(sample_eml: str) -> None:
    data = workorder.extract_work_order(sample_eml).to_dict()
    assert data["job_number"] == "V1416404427"
    assert data["building_code"] == "SEA124 Seattle Campus"
    assert data["building_address"] == "410 Terry Ave N, Seattle"
    assert data["device_id"] == "Reader 3 East Door"


def test_service_call_prefix_and_fallback_labels() -> None:
    message = (
        "Subject: Service Call:   Door   Forced\r\n"
        "\r\n"
        "sim-t ticket: p130773915\r\n"
        "Site: SEB2040\r\n"
        "Address: 1 Main St\r\n"
    )
    order = workorder.extract_work_order(message)
    assert order.job_name == "Door Forced"
    assert order.job_number == "P130773915"
    assert order.building == "SEB2040"
    assert order.address == "1 Main St"
    assert order.device_name == ""
    assert order.problem_description == ""


def test_problem_description_stops_at_separator() -> None:
    body = (
        "Problem Description: Power Supply fault\n"
        "\n"
        "Battery low=2C replace\n"
        "==========\n"
        "Footer text\n"
    )
    assert workorder.extract_problem_description(body) == "Power Supply fault Battery low, replace"


def test_split_message_without_body() -> None:
    assert workorder.split_message("Subject: Alarm\n") == ("Alarm", "")
    assert workorder.split_message("no headers at all") == ("", "")
